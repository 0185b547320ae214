from __future__ import annotations

import json
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from backoffice.config import settings


class GeminiReportProvider:
    def __init__(self) -> None:
        if not settings.gemini_api_key:
            raise RuntimeError('GEMINI_API_KEY is required')
        self.base_url = settings.gemini_api_base_url.rstrip('/')
        self.model = settings.gemini_model
        self.timeout_seconds = settings.gemini_timeout_seconds
        self.headers = {
            'Content-Type': 'application/json',
            'x-goog-api-key': settings.gemini_api_key,
        }

    def _post(self, path: str, payload: dict) -> dict:
        req = Request(
            url=f'{self.base_url}{path}',
            data=json.dumps(payload).encode('utf-8'),
            headers=self.headers,
            method='POST',
        )
        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                data = json.loads(response.read().decode('utf-8'))
        except HTTPError as exc:
            body = exc.read().decode('utf-8', errors='ignore') if exc.fp else ''
            raise RuntimeError(f'Gemini API error {exc.code}: {body}') from exc
        except URLError as exc:
            raise RuntimeError(f'Gemini API network error: {exc.reason}') from exc

        if data.get('error'):
            raise RuntimeError(f"Gemini API returned an error: {data['error']}")
        return data

    def generate(self, prompt: str) -> str:
        response = self._post(
            f'/models/{quote(self.model)}:generateContent',
            {'contents': [{'parts': [{'text': prompt}]}]},
        )
        candidates = response.get('candidates') or []
        if not candidates:
            return ''
        parts = (candidates[0].get('content') or {}).get('parts') or []
        return ''.join(str(part.get('text', '')) for part in parts)
