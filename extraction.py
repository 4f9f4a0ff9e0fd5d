"""
Gemini vision extraction of settlement spreadsheet figures
"""
from __future__ import annotations
import json
import logging
import os
from typing import Any, Optional, Tuple

from google import genai
from google.genai import types

from config import DEFAULT_MODEL, get_api_key
from models import Entry, ExtractedRecord
from utils import new_id, safe_float

logger = logging.getLogger(__name__)

COMMUNICATION_ERROR = "Falha ao se comunicar com a IA. Verifique a imagem ou tente novamente."
FORMAT_ERROR = "A resposta da IA não corresponde ao formato esperado."
READ_ERROR = "Falha ao ler o arquivo de imagem."
MISSING_KEY_ERROR = "Chave da API Gemini não configurada (GEMINI_API_KEY)."

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".webp": "image/webp",
}

PROMPT = (
    "Analise esta imagem de uma planilha de cálculo judicial trabalhista brasileira. "
    "Siga esta regra estritamente: "
    "1. Verifique se a planilha contém colunas como 'Devido', 'Pago' e 'Diferença'. "
    "2. Se a coluna 'Diferença' existir, TODOS os valores monetários para extração DEVEM ser obtidos "
    "EXCLUSIVAMENTE desta coluna, pois ela representa o saldo remanescente. "
    "3. Se a coluna 'Diferença' não existir, extraia os valores das colunas principais ('Valor', 'Total', etc.). "
    "Extraia as informações financeiras e retorne-as no formato JSON, seguindo o schema fornecido. "
    "Certifique-se de que todos os valores monetários sejam números positivos."
)

_ENTRY_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "descricao": {"type": "STRING", "description": "A descrição do lançamento."},
        "valor": {"type": "NUMBER", "description": "O valor numérico do lançamento."},
    },
    "required": ["descricao", "valor"],
}

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "valorBrutoReclamante": {
            "type": "NUMBER",
            "description": "O valor total bruto devido ao reclamante (autor/exequente), geralmente "
                           "'Crédito do(a) Exequente', 'Principal + Juros' ou similar.",
        },
        "descontosReclamante": {
            "type": "ARRAY",
            "description": "Descontos aplicados ao valor do reclamante, como 'INSS', 'IRPF', 'Contribuição Social'.",
            "items": _ENTRY_SCHEMA,
        },
        "reclamadaDebitos": {
            "type": "ARRAY",
            "description": "Débitos da reclamada com terceiros, como 'Custas', 'Honorários', 'INSS - Cota Empresa'.",
            "items": _ENTRY_SCHEMA,
        },
        "contribuicaoSocialTotal": {
            "type": "NUMBER",
            "description": "Em planilhas de 'Resumo do Cálculo', a SOMA das partes do empregado e da empresa "
                           "da Contribuição Social. Em planilhas de 'Atualização' (coluna 'Diferença'), use 0.",
        },
    },
    "required": ["valorBrutoReclamante", "descontosReclamante", "reclamadaDebitos"],
}


class ExtractionError(Exception):
    """User-facing extraction failure"""


def _is_number(x: Any) -> bool:
    return isinstance(x, (int, float)) and not isinstance(x, bool)


def _to_entries(items: list) -> list:
    out = []
    for raw in items:
        if not isinstance(raw, dict):
            raise ExtractionError(FORMAT_ERROR)
        out.append(Entry(
            id=new_id(),
            description=str(raw.get("descricao") or ""),
            amount=max(0.0, safe_float(raw.get("valor"), 0.0)),
        ))
    return out


def record_from_payload(data: Any) -> ExtractedRecord:
    """Validate the untyped JSON answer and convert it to an ExtractedRecord"""
    if (
        not isinstance(data, dict)
        or not _is_number(data.get("valorBrutoReclamante"))
        or not isinstance(data.get("descontosReclamante"), list)
        or not isinstance(data.get("reclamadaDebitos"), list)
    ):
        raise ExtractionError(FORMAT_ERROR)

    total_cs = data.get("contribuicaoSocialTotal")
    return ExtractedRecord(
        gross_claimant_credit=max(0.0, float(data["valorBrutoReclamante"])),
        discounts=_to_entries(data["descontosReclamante"]),
        respondent_debits=_to_entries(data["reclamadaDebitos"]),
        total_social_contribution=float(total_cs) if _is_number(total_cs) else None,
    )


def read_image(path: str) -> Tuple[bytes, str]:
    """Read image bytes and guess the mime type from the extension"""
    ext = os.path.splitext(path)[1].lower()
    mime = MIME_TYPES.get(ext)
    if mime is None:
        raise ExtractionError(READ_ERROR)
    try:
        with open(path, "rb") as f:
            return f.read(), mime
    except OSError as e:
        logger.error("Could not read image %s: %s", path, e)
        raise ExtractionError(READ_ERROR) from e


def extract_from_image(
    image: bytes,
    mime_type: str = "image/jpeg",
    client: Optional[genai.Client] = None,
    model: str = DEFAULT_MODEL
) -> ExtractedRecord:
    """
    Send one image to Gemini and return the raw (unclassified) record.
    Raises ExtractionError on any failure.
    """
    api_key = None
    if client is None:
        api_key = get_api_key()
        if not api_key:
            raise ExtractionError(MISSING_KEY_ERROR)

    logger.info("Extraction request: model=%s, %d bytes (%s)", model, len(image), mime_type)
    try:
        if client is None:
            client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=model,
            contents=[
                types.Part.from_bytes(data=image, mime_type=mime_type),
                PROMPT,
            ],
            config=types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=RESPONSE_SCHEMA,
            ),
        )
        data = json.loads((response.text or "").strip())
    except Exception as e:
        logger.error("Error calling Gemini API: %s", e)
        raise ExtractionError(COMMUNICATION_ERROR) from e

    record = record_from_payload(data)
    logger.info(
        "Extraction ok: gross=%.2f, %d discounts, %d debits",
        record.gross_claimant_credit, len(record.discounts), len(record.respondent_debits)
    )
    return record
