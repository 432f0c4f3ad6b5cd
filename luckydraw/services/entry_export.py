"""Spreadsheet export of lucky-draw entries."""

from __future__ import annotations

import asyncio
import io
from typing import Any, Callable, List, Tuple

from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from luckydraw.schemas import EntryRecord
from luckydraw.services.entries import EntryService

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _profile_field(name: str) -> Callable[[EntryRecord], Any]:
    def _read(entry: EntryRecord) -> Any:
        if entry.customer is None:
            return ""
        return getattr(entry.customer, name) or ""

    return _read


def _created_at(entry: EntryRecord) -> Any:
    # Excel cells cannot hold timezone-aware datetimes.
    return entry.created_at.replace(tzinfo=None)


def _full_address(entry: EntryRecord) -> str:
    return entry.customer.full_address if entry.customer else ""


# (header, width, value getter)
COLUMNS: List[Tuple[str, int, Callable[[EntryRecord], Any]]] = [
    ("Entered At", 22, _created_at),
    ("Member ID", 20, lambda entry: entry.member_id),
    ("Name", 20, _profile_field("name")),
    ("Cellphone", 20, lambda entry: entry.cellphone or ""),
    ("Email", 30, _profile_field("email")),
    ("Address", 50, _full_address),
    ("SMS Opt-in", 12, _profile_field("sms")),
    ("News Mail Opt-in", 16, _profile_field("news_mail")),
    ("Gender", 10, _profile_field("gender")),
    ("Shop No", 10, _profile_field("shop_no")),
    ("Group No", 10, _profile_field("group_no")),
    ("Member Authentication", 15, _profile_field("member_authentication")),
    ("Blacklisted", 12, _profile_field("use_blacklist")),
    ("Blacklist Type", 15, _profile_field("blacklist_type")),
    ("Authentication Method", 15, _profile_field("authentication_method")),
    ("Solar Calendar", 10, _profile_field("solar_calendar")),
    ("Total Points", 12, _profile_field("total_points")),
    ("Available Points", 12, _profile_field("available_points")),
    ("Used Points", 12, _profile_field("used_points")),
    ("Last Login", 20, _profile_field("last_login_date")),
    ("Joined", 20, _profile_field("created_date")),
    ("Uses Mobile App", 10, _profile_field("use_mobile_app")),
    ("Available Credits", 12, _profile_field("available_credits")),
    ("Fixed Group", 10, _profile_field("fixed_group")),
]


class EntryExportService:
    """Render every stored entry as an .xlsx workbook."""

    def __init__(self, entry_service: EntryService, sheet_title: str = "Entries") -> None:
        self._entries = entry_service
        self._sheet_title = sheet_title

    async def build_workbook(self) -> bytes:
        entries = await self._entries.list_entries()
        entries.sort(key=lambda entry: entry.created_at)
        return await asyncio.to_thread(self._render, entries)

    def _render(self, entries: List[EntryRecord]) -> bytes:
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = self._sheet_title

        sheet.append([header for header, _, _ in COLUMNS])
        for index, (_, width, _) in enumerate(COLUMNS, start=1):
            sheet.column_dimensions[get_column_letter(index)].width = width

        for entry in entries:
            sheet.append([getter(entry) for _, _, getter in COLUMNS])

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()


__all__ = ["COLUMNS", "EntryExportService", "XLSX_MEDIA_TYPE"]
