"""
Módulo de exportação Excel.
Gera uma planilha por conta a partir do resultado consolidado de um lote de extratos.
"""
import re
from io import BytesIO
from typing import List, Optional, Set

import pandas as pd

from pdfprocessor.common.logging_config import get_logger
from pdfprocessor.common.models import ConsolidatedResult, Record
from pdfprocessor.parsing.config.layout import LayoutProfile

logger = get_logger(__name__)

MAX_SHEET_NAME = 31
INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")
MAX_COLUMN_WIDTH = 60

WARNING_SHEET = 'Aviso'
FAILED_SHEET = 'Arquivos com erro'
NO_DATA_MESSAGE = 'Nenhum lançamento encontrado nos arquivos enviados.'


def sanitize_sheet_name(name: str, used: Set[str]) -> str:
    """
    Nome de aba válido para o Excel: sem []:*?/\\, no máximo 31 caracteres e
    único dentro do workbook (comparação sem diferenciar maiúsculas).
    """
    base = INVALID_SHEET_CHARS.sub('_', name or '').strip().strip("'") or 'Conta'
    base = base[:MAX_SHEET_NAME]
    candidate = base
    n = 2
    while candidate.lower() in used:
        suffix = f" ({n})"
        candidate = base[:MAX_SHEET_NAME - len(suffix)] + suffix
        n += 1
    used.add(candidate.lower())
    return candidate


class ExcelExporter:
    """Exportador Excel dos lançamentos extraídos, uma aba por conta."""

    COLORS = {
        'header_bg': '#1e293b',
        'header_text': '#ffffff',
        'warning': '#f59e0b',
    }

    def __init__(self, include_confidence: Optional[bool] = None):
        """
        Args:
            include_confidence: Acrescenta as colunas de confiança da heurística
                de valores. None = somente se o layout usa heurística.
        """
        self.include_confidence = include_confidence

    def _columns(self, profile: LayoutProfile) -> List[str]:
        columns = list(profile.column_names)
        with_confidence = self.include_confidence
        if with_confidence is None:
            with_confidence = profile.amount_heuristic is not None
        if with_confidence:
            columns += ['confidence', 'notes']
        return columns

    @staticmethod
    def _row(record: Record, columns: List[str]) -> dict:
        row = {name: record.get(name) for name in columns}
        if 'confidence' in row:
            row['confidence'] = record.confidence or ''
            row['notes'] = '; '.join(record.notes)
        return row

    def _write_sheet(self, writer, sheet_name: str, df: pd.DataFrame, header_color: str) -> None:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        workbook = writer.book
        sheet = writer.sheets[sheet_name]

        header_format = workbook.add_format({
            'bold': True,
            'font_color': self.COLORS['header_text'],
            'bg_color': header_color,
            'border': 1,
            'align': 'center',
            'valign': 'vcenter',
            'font_size': 11,
        })
        for col, header in enumerate(df.columns):
            sheet.write(0, col, header, header_format)
            values = df[header].astype(str).tolist()
            width = max([len(str(header))] + [len(v) for v in values])
            sheet.set_column(col, col, min(width + 2, MAX_COLUMN_WIDTH))

        # Congelar primeira linha
        sheet.freeze_panes(1, 0)

    def generate(self, consolidated: ConsolidatedResult, profile: LayoutProfile) -> bytes:
        """
        Gera o arquivo Excel completo.

        Args:
            consolidated: Resultado consolidado do lote
            profile: Layout usado na extração (define as colunas)

        Returns:
            Conteúdo do .xlsx em bytes
        """
        buffer = BytesIO()
        columns = self._columns(profile)
        used: Set[str] = set()

        with pd.ExcelWriter(buffer, engine='xlsxwriter') as writer:
            if consolidated.record_count == 0:
                df = pd.DataFrame({'Mensagem': [NO_DATA_MESSAGE]})
                self._write_sheet(writer, sanitize_sheet_name(WARNING_SHEET, used), df, self.COLORS['warning'])
                logger.warning("Workbook generated without records", profile=profile.name)
            else:
                for account_key, records in consolidated.accounts.items():
                    if not records:
                        continue
                    df = pd.DataFrame([self._row(r, columns) for r in records], columns=columns)
                    sheet_name = sanitize_sheet_name(account_key, used)
                    self._write_sheet(writer, sheet_name, df, self.COLORS['header_bg'])
                    logger.debug(f"Sheet '{sheet_name}': {len(records)} row(s)", account=account_key)

            if consolidated.failed:
                df = pd.DataFrame([f.to_dict() for f in consolidated.failed])
                self._write_sheet(writer, sanitize_sheet_name(FAILED_SHEET, used), df, self.COLORS['warning'])

        buffer.seek(0)
        return buffer.getvalue()
