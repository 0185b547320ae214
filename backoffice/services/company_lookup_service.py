from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from backoffice.config import settings
from backoffice.schemas import Address

logger = logging.getLogger(__name__)

NON_DIGIT_RE = re.compile(r'\D')
CNPJ_LENGTH = 14


class LookupFailure(str, Enum):
    MALFORMED = 'MALFORMED'
    NOT_FOUND = 'NOT_FOUND'
    UNREACHABLE = 'UNREACHABLE'


class CompanyLookupError(RuntimeError):
    def __init__(self, kind: LookupFailure, message: str) -> None:
        super().__init__(message)
        self.kind = kind


@dataclass(frozen=True)
class CompanyRecord:
    cnpj: str
    legal_name: str
    trade_name: str
    street: str
    number: str
    neighborhood: str
    city: str
    state: str
    zip: str
    phone: str
    email: str

    @property
    def display_name(self) -> str:
        return self.trade_name or self.legal_name

    def address(self) -> Address:
        return Address(
            street=self.street,
            number=self.number,
            city=self.city,
            state=self.state,
            zip=self.zip,
            neighborhood=self.neighborhood,
        )


def clean_cnpj(value: str | None) -> str:
    return NON_DIGIT_RE.sub('', value or '')


def format_cnpj(value: str | None) -> str:
    digits = clean_cnpj(value)[:CNPJ_LENGTH]
    if len(digits) != CNPJ_LENGTH:
        return digits
    return f'{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}'


def _text(payload: dict, key: str) -> str:
    value = payload.get(key)
    return str(value).strip() if value is not None else ''


def _fetch_json(url: str) -> dict:
    req = Request(url=url, headers={'Accept': 'application/json'}, method='GET')
    try:
        with urlopen(req, timeout=settings.company_lookup_timeout_seconds) as response:
            return json.loads(response.read().decode('utf-8'))
    except HTTPError as exc:
        if exc.code == 404:
            raise CompanyLookupError(LookupFailure.NOT_FOUND, 'Company not found in the registry') from exc
        raise CompanyLookupError(
            LookupFailure.UNREACHABLE, f'Company registry error {exc.code}'
        ) from exc
    except URLError as exc:
        raise CompanyLookupError(
            LookupFailure.UNREACHABLE, f'Company registry network error: {exc.reason}'
        ) from exc
    except ValueError as exc:
        raise CompanyLookupError(LookupFailure.UNREACHABLE, 'Company registry returned invalid data') from exc


def lookup_company(raw_cnpj: str) -> CompanyRecord:
    cnpj = clean_cnpj(raw_cnpj)
    if len(cnpj) != CNPJ_LENGTH:
        raise CompanyLookupError(LookupFailure.MALFORMED, f'CNPJ must contain {CNPJ_LENGTH} digits')

    try:
        payload = _fetch_json(f"{settings.company_lookup_base_url.rstrip('/')}/{cnpj}")
    except CompanyLookupError as exc:
        logger.warning('Company lookup for %s failed: %s', cnpj, exc)
        raise

    return CompanyRecord(
        cnpj=cnpj,
        legal_name=_text(payload, 'razao_social'),
        trade_name=_text(payload, 'nome_fantasia'),
        street=_text(payload, 'logradouro'),
        number=_text(payload, 'numero'),
        neighborhood=_text(payload, 'bairro'),
        city=_text(payload, 'municipio'),
        state=_text(payload, 'uf'),
        zip=_text(payload, 'cep'),
        phone=_text(payload, 'ddd_telefone_1'),
        email=_text(payload, 'email'),
    )


def prefill_customer(record: CompanyRecord) -> dict:
    return {
        'name': record.display_name,
        'email': record.email,
        'phone': record.phone,
        'cnpj': record.cnpj,
        'address': record.address().model_dump(),
    }


def prefill_supplier(record: CompanyRecord) -> dict:
    return {
        'name': record.legal_name,
        'cnpj': record.cnpj,
        'contact': record.display_name,
        'email': record.email,
        'address': record.address().model_dump(),
    }
