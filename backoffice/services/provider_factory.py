from __future__ import annotations

from functools import lru_cache

from backoffice.config import settings
from backoffice.services.gemini_report_provider import GeminiReportProvider
from backoffice.services.mock_report_provider import MockReportProvider


@lru_cache(maxsize=1)
def get_report_provider():
    provider = settings.report_provider.strip().lower()
    if provider == 'gemini':
        return GeminiReportProvider()
    return MockReportProvider()
