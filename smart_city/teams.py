"""Response teams. Held in memory only and reseeded on every console load."""

from .models import ComplaintCategory, Team

_TEAM_TEMPLATE = [
    ('ROAD-T1', 'Road Squad Alpha', ComplaintCategory.ROAD_DAMAGE),
    ('ROAD-T2', 'Road Squad Beta', ComplaintCategory.ROAD_DAMAGE),
    ('WATER-T1', 'Hydraulic Crew 1', ComplaintCategory.WATER_LEAKAGE),
    ('WATER-T2', 'Hydraulic Crew 2', ComplaintCategory.WATER_LEAKAGE),
    ('GARB-T1', 'Sanitation Unit 1', ComplaintCategory.GARBAGE),
    ('GARB-T2', 'Sanitation Unit 2', ComplaintCategory.GARBAGE),
    ('DRAIN-T1', 'Drainage Crew 1', ComplaintCategory.DRAINAGE),
    ('DRAIN-T2', 'Drainage Crew 2', ComplaintCategory.DRAINAGE),
    ('LIGHT-T1', 'Lighting Unit 1', ComplaintCategory.STREET_LIGHT),
    ('LIGHT-T2', 'Lighting Unit 2', ComplaintCategory.STREET_LIGHT),
    ('OTHER-T1', 'Support Team 1', ComplaintCategory.OTHER),
    ('OTHER-T2', 'Support Team 2', ComplaintCategory.OTHER),
]


def seed_teams():
    return [Team(id=team_id, name=name, department=department, is_available=True)
            for team_id, name, department in _TEAM_TEMPLATE]


class TeamRoster:
    def __init__(self, teams=None):
        self.teams = teams if teams is not None else seed_teams()

    def reseed(self):
        self.teams = seed_teams()

    def get(self, team_id):
        return next((t for t in self.teams if t.id == team_id), None)

    def first_available(self, department):
        return next((t for t in self.teams if t.department == department and t.is_available), None)

    def mark_busy(self, team_id):
        self._set_available(team_id, False)

    def release(self, team_id):
        self._set_available(team_id, True)

    def _set_available(self, team_id, available):
        team = self.get(team_id)
        if team is not None:
            team.is_available = available

    def by_department(self):
        grouped = {category: [] for category in ComplaintCategory}
        for team in self.teams:
            grouped[team.department].append(team)
        return grouped
