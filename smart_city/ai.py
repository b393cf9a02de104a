"""
Gemini-backed image classification, legitimacy verification and search, Veo
video generation, and Nominatim reverse geocoding.

Verification and geocoding never block a submission: on failure they fall
back to a safe default. Classification, search and video generation raise
ExternalServiceError and leave it to the caller to tell the user.
"""

import base64
import json
import logging
import time

import google.generativeai as genai
from google import genai as google_genai
from google.genai import types as genai_types
from geopy.exc import GeocoderServiceError
from geopy.geocoders import Nominatim

from .errors import ExternalServiceError
from .models import ComplaintCategory, Verification

logger = logging.getLogger(__name__)

FALLBACK_VERIFICATION = {'isLegitimate': True, 'reason': 'manual review required', 'confidence': 0.5}

CLASSIFY_PROMPT = """You are a Smart City AI Assistant. Analyze this photo taken by a citizen.
Identify:
1. The most likely category from this list: GARBAGE, ROAD_DAMAGE, WATER_LEAKAGE, DRAINAGE, STREET_LIGHT, OTHER.
2. A concise, professional 1-2 sentence description of the issue.
Return a JSON object with 'category' and 'description'."""

VERIFY_PROMPT = """System role: Expert Urban Infrastructure Auditor.
Task: Analyze this photo for a reported "{category}" complaint.
Rules:
1. Determine if the issue is physically visible in the photo.
2. Rate the legitimacy based on evidence.
3. Provide a clear reason for your decision.
Return a JSON object only, with keys isLegitimate (boolean), reason (string) and confidence (number 0-1)."""

VIDEO_PROMPT = 'A professional handheld camera shot inspecting this urban damage, showing its impact on the street.'


def decode_image(image):
    """Accept a base64 data URL or bare base64 string; return (mime_type, bytes)."""
    mime_type = 'image/jpeg'
    data = image
    if image.startswith('data:') and ',' in image:
        header, data = image.split(',', 1)
        mime_type = header[5:].split(';')[0] or mime_type
    return mime_type, base64.b64decode(data)


class GeminiService:
    def __init__(self, api_key=None, model='gemini-1.5-pro', search_model='gemini-1.5-flash',
                 geocoder_user_agent='smart-city-complaints', video_model='veo-3.1-fast-generate-preview',
                 video_poll_seconds=10):
        self.api_key = api_key
        self.model_name = model
        self.search_model_name = search_model
        self.video_model_name = video_model
        self.video_poll_seconds = video_poll_seconds
        self.geocoder_user_agent = geocoder_user_agent
        self._configured = False

    def _model(self, name, **kwargs):
        if not self.api_key:
            raise ExternalServiceError("GEMINI_API_KEY is not configured.")
        if not self._configured:
            genai.configure(api_key=self.api_key)
            self._configured = True
        return genai.GenerativeModel(name, **kwargs)

    def _generate_json(self, prompt, image):
        mime_type, data = decode_image(image)
        model = self._model(self.model_name)
        response = model.generate_content(
            [prompt, {'mime_type': mime_type, 'data': data}],
            generation_config={'response_mime_type': 'application/json'},
        )
        return json.loads(response.text or '{}')

    def classify_image(self, image):
        try:
            result = self._generate_json(CLASSIFY_PROMPT, image)
        except ExternalServiceError:
            raise
        except Exception as e:
            logger.error("AI analysis failed: %s", e)
            raise ExternalServiceError("AI image analysis failed.")
        if not isinstance(result, dict):
            logger.error("AI analysis returned %s instead of an object", type(result).__name__)
            raise ExternalServiceError("AI image analysis failed.")
        try:
            category = ComplaintCategory(result.get('category'))
        except ValueError:
            category = ComplaintCategory.OTHER
        return {'category': category.value, 'description': result.get('description', '')}

    def verify_image(self, image, category):
        category = getattr(category, 'value', category)
        try:
            result = self._generate_json(VERIFY_PROMPT.format(category=category), image)
            return Verification.from_dict(result)
        except Exception as e:
            logger.warning("Verification failed, falling back to manual review: %s", e)
            return Verification.from_dict(FALLBACK_VERIFICATION)

    def search_grounding(self, query):
        try:
            model = self._model(self.search_model_name, tools='google_search_retrieval')
            response = model.generate_content(query)
            text = response.text or ''
        except ExternalServiceError:
            raise
        except Exception as e:
            logger.error("Grounding search failed: %s", e)
            raise ExternalServiceError("Grounding Search Failed.")

        sources = []
        candidates = getattr(response, 'candidates', None) or []
        metadata = getattr(candidates[0], 'grounding_metadata', None) if candidates else None
        for chunk in getattr(metadata, 'grounding_chunks', None) or []:
            web = getattr(chunk, 'web', None)
            if web is not None:
                sources.append({'title': web.title, 'uri': web.uri})
        return {'text': text, 'sources': sources}

    def generate_video(self, image):
        """Animate the complaint photo with Veo. Blocks until the operation is done; returns the video URI."""
        if not self.api_key:
            raise ExternalServiceError("GEMINI_API_KEY is not configured.")
        try:
            mime_type, data = decode_image(image)
            client = google_genai.Client(api_key=self.api_key)
            operation = client.models.generate_videos(
                model=self.video_model_name,
                prompt=VIDEO_PROMPT,
                image=genai_types.Image(image_bytes=data, mime_type=mime_type),
                config=genai_types.GenerateVideosConfig(
                    number_of_videos=1, resolution='720p', aspect_ratio='16:9'),
            )
            while not operation.done:
                time.sleep(self.video_poll_seconds)
                operation = client.operations.get(operation)
            videos = operation.response.generated_videos if operation.response else None
            uri = videos[0].video.uri if videos else None
        except Exception as e:
            logger.error("Video generation failed: %s", e)
            raise ExternalServiceError("AI Video generation failed.")
        if not uri:
            logger.error("Video generation finished without a video")
            raise ExternalServiceError("AI Video generation failed.")
        return uri

    def reverse_geocode(self, lat, lng):
        geolocator = Nominatim(user_agent=self.geocoder_user_agent)
        try:
            location = geolocator.reverse((lat, lng))
        except (GeocoderServiceError, ValueError) as e:
            logger.warning("Reverse geocoding failed for %s,%s: %s", lat, lng, e)
            return None
        return location.address if location else None
