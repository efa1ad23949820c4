"""
Google Sheets 원장
==================
시트 단위 행 읽기 / 주기간 기준 삭제 후 추가

시트 첫 행은 헤더. 행은 {헤더: 셀 문자열} 딕셔너리로 돌려준다.

사용법:
    ledger = GoogleSheetsLedger.from_service_account(key_b64, spreadsheet_id)
    periods = ledger.list_week_periods("集金データ")
    rows = ledger.read_rows_for_period("集金データ", periods[0])
"""
import base64
import binascii
import json
import logging
from typing import Any, Dict, List

from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from clubsync import constants
from clubsync.errors import ConfigurationError, LedgerError, NotFoundError
from clubsync.utils.retry import retry_on_exception
from clubsync.utils.validators import normalize_period_text

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

Row = Dict[str, str]


def load_credentials(service_account_key_b64: str):
    """Base64 서비스 계정 JSON → Credentials"""
    try:
        info = json.loads(base64.b64decode(service_account_key_b64).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise ConfigurationError(f"GOOGLE_SERVICE_ACCOUNT_KEY 해석 실패: {e}")
    return service_account.Credentials.from_service_account_info(info, scopes=SCOPES)


def _column_letter(index: int) -> str:
    """0-based 열 번호 → A1 표기 (0 → A, 26 → AA)"""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def _quote(sheet: str) -> str:
    return "'" + sheet.replace("'", "''") + "'"


class GoogleSheetsLedger:
    """Google Sheets 기반 원장"""

    def __init__(self, service, spreadsheet_id: str):
        self._service = service
        self.spreadsheet_id = spreadsheet_id

    @classmethod
    def from_service_account(cls, service_account_key_b64: str, spreadsheet_id: str) -> "GoogleSheetsLedger":
        creds = load_credentials(service_account_key_b64)
        service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return cls(service, spreadsheet_id)

    # ─── 호출 공통 ───

    @retry_on_exception(max_attempts=3, base_delay=2.0)
    def _execute(self, request):
        return request.execute()

    def _call(self, request, action: str) -> Dict[str, Any]:
        try:
            return self._execute(request)
        except HttpError as e:
            status = getattr(e.resp, "status", 0)
            raise LedgerError(f"SHEETS_{status}", f"{action} 실패: {e}", int(status or 0))

    def _sheet_ids(self) -> Dict[str, int]:
        """시트명 → sheetId"""
        meta = self._call(
            self._service.spreadsheets().get(
                spreadsheetId=self.spreadsheet_id, fields="sheets.properties"
            ),
            "스프레드시트 조회",
        )
        return {
            s["properties"]["title"]: s["properties"]["sheetId"]
            for s in meta.get("sheets", [])
        }

    def _get_values(self, range_name: str) -> List[List[str]]:
        result = self._call(
            self._service.spreadsheets().values().get(
                spreadsheetId=self.spreadsheet_id, range=range_name
            ),
            f"읽기 {range_name}",
        )
        return result.get("values", [])

    def _read_table(self, sheet: str) -> List[List[str]]:
        sheet_ids = self._sheet_ids()
        if sheet not in sheet_ids:
            raise NotFoundError(f"시트를 찾을 수 없습니다: {sheet}", available=sorted(sheet_ids))
        return self._get_values(_quote(sheet))

    @staticmethod
    def _to_rows(values: List[List[str]]) -> List[Row]:
        if not values:
            return []
        headers = [str(h).strip() for h in values[0]]
        rows = []
        for raw in values[1:]:
            if not any(str(cell).strip() for cell in raw):
                continue
            cells = list(raw) + [""] * (len(headers) - len(raw))
            rows.append({h: str(cells[i]) for i, h in enumerate(headers) if h})
        return rows

    # ─── 읽기 ───

    def list_week_periods(self, sheet: str) -> List[str]:
        """주기간 열의 고유값 (내림차순)"""
        rows = self._to_rows(self._read_table(sheet))
        periods = {
            normalize_period_text(r.get(constants.WEEK_PERIOD_HEADER))
            for r in rows
        }
        periods.discard("")
        return sorted(periods, reverse=True)

    def read_rows_for_period(self, sheet: str, period: str) -> List[Row]:
        """주기간이 일치하는 행"""
        target = normalize_period_text(period)
        return [
            r for r in self._to_rows(self._read_table(sheet))
            if normalize_period_text(r.get(constants.WEEK_PERIOD_HEADER)) == target
        ]

    def read_all_rows(self, sheet: str) -> List[Row]:
        """마스터 시트 전체 행"""
        return self._to_rows(self._read_table(sheet))

    # ─── 쓰기 ───

    def _ensure_sheet(self, sheet: str) -> int:
        sheet_ids = self._sheet_ids()
        if sheet in sheet_ids:
            return sheet_ids[sheet]

        logger.info(f"시트 생성: {sheet}")
        response = self._call(
            self._service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id,
                body={"requests": [{"addSheet": {"properties": {"title": sheet}}}]},
            ),
            f"시트 생성 {sheet}",
        )
        return response["replies"][0]["addSheet"]["properties"]["sheetId"]

    def _ensure_header(self, sheet: str, headers: List[str]) -> List[str]:
        current = self._get_values(f"{_quote(sheet)}!1:1")
        if current and any(str(h).strip() for h in current[0]):
            return [str(h).strip() for h in current[0]]

        self._call(
            self._service.spreadsheets().values().update(
                spreadsheetId=self.spreadsheet_id,
                range=f"{_quote(sheet)}!A1",
                valueInputOption="RAW",
                body={"values": [headers]},
            ),
            f"헤더 기록 {sheet}",
        )
        return list(headers)

    def _delete_period_rows(self, sheet: str, sheet_id: int, headers: List[str], period: str) -> int:
        if constants.WEEK_PERIOD_HEADER not in headers:
            raise LedgerError(
                "MISSING_COLUMN", f"{sheet} 시트에 {constants.WEEK_PERIOD_HEADER} 열이 없습니다"
            )
        col = _column_letter(headers.index(constants.WEEK_PERIOD_HEADER))
        values = self._get_values(f"{_quote(sheet)}!{col}:{col}")

        target = normalize_period_text(period)
        # 0-based 행 번호, 헤더(0) 제외
        indices = [
            i for i, cell in enumerate(values)
            if i > 0 and cell and normalize_period_text(cell[0]) == target
        ]
        if not indices:
            return 0

        # 아래에서부터 삭제해야 위쪽 행 번호가 유지됨
        requests_body = [
            {
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": i,
                        "endIndex": i + 1,
                    }
                }
            }
            for i in sorted(indices, reverse=True)
        ]
        self._call(
            self._service.spreadsheets().batchUpdate(
                spreadsheetId=self.spreadsheet_id, body={"requests": requests_body}
            ),
            f"기존 행 삭제 {sheet}",
        )
        return len(indices)

    def append_rows(
        self,
        sheet: str,
        rows: List[List[str]],
        headers: List[str],
        week_period: str,
    ) -> Dict[str, int]:
        """
        주기간 기준 삭제 후 추가 (같은 주기간 재실행 시 멱등)

        Args:
            sheet: 시트명 (없으면 생성)
            rows: headers 순서의 셀 값 목록
            headers: 헤더 행 (시트가 비어 있으면 기록)
            week_period: 삭제 기준 주기간

        Returns:
            {"deleted": n, "added": m}
        """
        sheet_id = self._ensure_sheet(sheet)
        live_headers = self._ensure_header(sheet, headers)
        deleted = self._delete_period_rows(sheet, sheet_id, live_headers, week_period)

        if rows:
            self._call(
                self._service.spreadsheets().values().append(
                    spreadsheetId=self.spreadsheet_id,
                    range=f"{_quote(sheet)}!A1",
                    valueInputOption="RAW",
                    insertDataOption="INSERT_ROWS",
                    body={"values": rows},
                ),
                f"행 추가 {sheet}",
            )
        logger.info(f"{sheet}: 기존 {deleted}행 삭제, {len(rows)}행 추가")
        return {"deleted": deleted, "added": len(rows)}
