# Dashboard Upload Processor
#
# Parses SFMC CSV exports (campaign reports, tracking extracts, send logs)
# and manual form entries into dashboard records. Column names differ
# between export types, so each field is looked up through a list of
# known aliases, case-insensitively.

import csv
import io
import logging
import re
from typing import Any, Dict, List, Optional

from ...utils.timezone_utils import now_in_timezone, to_api_timestamp

logger = logging.getLogger(__name__)

CAMPAIGNS = 'campaigns'
TRACKING = 'tracking'
SENDS = 'sends'
DATA_TYPES = (CAMPAIGNS, TRACKING, SENDS)

class UploadParseError(ValueError):
    """Uploaded data could not be turned into dashboard records"""
    pass

class UploadProcessor:
    """Maps uploaded CSV rows and manual entries onto dashboard fields"""

    # Field -> accepted column names, in priority order
    COLUMN_ALIASES = {
        'id': ['Job ID', 'Send ID'],
        'name': ['Campaign Name', 'Email Name', 'Subject', 'Name'],
        'date': ['Send Date', 'Date Sent'],
        'status': ['Status'],
        'sent': ['Sent', 'Total Sent', 'Recipients'],
        'delivered': ['Delivered', 'Total Delivered'],
        'opened': ['Opened', 'Total Opens', 'Unique Opens'],
        'clicked': ['Clicked', 'Total Clicks', 'Unique Clicks'],
        'bounced': ['Bounced', 'Total Bounces'],
        'event_date': ['Date', 'Event Date'],
        'event_type': ['Event Type', 'Type'],
    }

    # Fields at least one of which must be present for each data type
    REQUIRED_FIELDS = {
        CAMPAIGNS: ['name', 'sent', 'opened', 'clicked'],
        TRACKING: ['event_type', 'event_date'],
        SENDS: ['sent', 'delivered', 'bounced'],
    }

    def parse_csv(self, csv_text: str) -> List[Dict[str, str]]:
        """
        Parse CSV text with a header row into a list of row dicts

        Raises:
            UploadParseError: empty input, no data rows, or malformed rows
        """
        if not csv_text or not csv_text.strip():
            raise UploadParseError('No CSV data provided')

        reader = csv.DictReader(io.StringIO(csv_text.lstrip('\ufeff')), skipinitialspace=True)
        records = []
        try:
            if not reader.fieldnames:
                raise UploadParseError('CSV header row is missing')
            reader.fieldnames = [name.strip() for name in reader.fieldnames]

            for line_number, row in enumerate(reader, start=2):
                if None in row:
                    raise UploadParseError(
                        f"Row {line_number} has {len(reader.fieldnames) + len(row[None])} fields, "
                        f"expected {len(reader.fieldnames)}"
                    )
                if not any((value or '').strip() for value in row.values()):
                    continue
                records.append({key: (value or '').strip() for key, value in row.items()})
        except csv.Error as e:
            raise UploadParseError(f"Malformed CSV: {str(e)}")

        if not records:
            raise UploadParseError('CSV contains a header but no data rows')

        return records

    def process(self, csv_text: str, data_type: Optional[str] = None) -> Dict[str, Any]:
        """
        Parse and process an upload

        Args:
            csv_text: Raw CSV file contents
            data_type: 'campaigns', 'tracking', 'sends' or None to auto-detect

        Returns:
            dict with `type`, `records` (row count) and one of the
            `campaigns` / `tracking` / `sends` keys
        """
        records = self.parse_csv(csv_text)

        if data_type and data_type not in DATA_TYPES:
            raise UploadParseError(f"Unknown dataType '{data_type}', expected one of {', '.join(DATA_TYPES)}")

        resolved = data_type or self.detect_type(records)
        self._check_required_columns(records, resolved)

        logger.info(f"📊 Processing {len(records)} records of type: {resolved}")

        if resolved == TRACKING:
            processed = self.process_tracking(records)
        elif resolved == SENDS:
            processed = self.process_sends(records)
        else:
            processed = self.process_campaigns(records)

        return {'type': resolved, 'records': len(records), resolved: processed}

    def detect_type(self, records: List[Dict[str, str]]) -> str:
        """Guess the export type from the column names of the first row"""
        fields = [name.lower() for name in records[0].keys()]

        if any('campaign' in f or 'email' in f or 'subject' in f for f in fields):
            logger.info("🎯 Auto-detected: Campaign data")
            return CAMPAIGNS

        # A bare 'Date' column only means tracking when no campaign metrics sit beside it
        has_metrics = any(self._has_column(fields, field) for field in ('sent', 'opened', 'clicked'))
        if self._has_column(fields, 'event_type') or (self._has_column(fields, 'event_date') and not has_metrics):
            logger.info("🎯 Auto-detected: Tracking data")
            return TRACKING

        logger.info("🎯 Auto-detected: Default campaign processing")
        return CAMPAIGNS

    def _has_column(self, fields: List[str], field: str) -> bool:
        return any(alias.lower() in fields for alias in self.COLUMN_ALIASES[field])

    def process_campaigns(self, records: List[Dict[str, str]]) -> List[Dict[str, Any]]:
        campaigns = []
        for index, record in enumerate(records, start=1):
            sent = self.to_int(self._lookup(record, 'sent'))
            delivered_raw = self._lookup(record, 'delivered')
            campaigns.append({
                'id': self._lookup(record, 'id') or f"upload_{index}",
                'name': self._lookup(record, 'name') or f"Campaign {index}",
                'date': self._lookup(record, 'date') or to_api_timestamp(now_in_timezone()),
                'status': self._lookup(record, 'status') or 'Completed',
                'sent': sent,
                'delivered': self.to_int(delivered_raw) if delivered_raw else sent,
                'opened': self.to_int(self._lookup(record, 'opened')),
                'clicked': self.to_int(self._lookup(record, 'clicked')),
                'bounced': self.to_int(self._lookup(record, 'bounced'))
            })
        return campaigns

    def process_tracking(self, records: List[Dict[str, str]]) -> Dict[str, Any]:
        """Count open and click events per day"""
        today = now_in_timezone().date().isoformat()
        by_date = {}
        opened = clicked = 0

        for record in records:
            date = (self._lookup(record, 'event_date') or today)[:10]
            event_type = (self._lookup(record, 'event_type') or 'open').lower()
            counts = by_date.setdefault(date, {'opens': 0, 'clicks': 0})

            if 'open' in event_type:
                counts['opens'] += 1
                opened += 1
            elif 'click' in event_type:
                counts['clicks'] += 1
                clicked += 1

        trends = [
            {'date': date, 'opens': counts['opens'], 'clicks': counts['clicks']}
            for date, counts in sorted(by_date.items())
        ]
        return {'opened': opened, 'clicked': clicked, 'trends': trends}

    def process_sends(self, records: List[Dict[str, str]]) -> Dict[str, int]:
        totals = {'totalSent': 0, 'delivered': 0, 'bounced': 0}
        for record in records:
            totals['totalSent'] += self.to_int(self._lookup(record, 'sent'))
            totals['delivered'] += self.to_int(self._lookup(record, 'delivered'))
            totals['bounced'] += self.to_int(self._lookup(record, 'bounced'))
        return totals

    def build_manual_campaigns(self, entries: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Turn manual form entries into campaign records

        Entries without a name or a sent count are skipped.

        Raises:
            UploadParseError: no entry had both a name and a sent count
        """
        valid = [
            entry for entry in entries or []
            if isinstance(entry, dict) and str(entry.get('name') or '').strip() and str(entry.get('sent') or '').strip()
        ]
        if not valid:
            raise UploadParseError('Please add at least one campaign with name and sent count')

        campaigns = []
        for index, entry in enumerate(valid, start=1):
            sent = self.to_int(entry.get('sent'))
            campaigns.append({
                'id': f"manual_{index}",
                'name': str(entry['name']).strip(),
                'date': entry.get('date') or to_api_timestamp(now_in_timezone()),
                'status': 'Completed',
                'sent': sent,
                'delivered': sent,
                'opened': self.to_int(entry.get('opened')),
                'clicked': self.to_int(entry.get('clicked')),
                'bounced': self.to_int(entry.get('bounced'))
            })
        return campaigns

    @staticmethod
    def to_int(value: Any) -> int:
        """Leading integer of a value ('1,234' -> 1234, '12.7' -> 12); junk -> 0; never negative"""
        if value is None:
            return 0
        if isinstance(value, (int, float)):
            return max(int(value), 0)
        match = re.match(r'\s*-?\d+', str(value).replace(',', '').replace(' ', ''))
        return max(int(match.group()), 0) if match else 0

    def _lookup(self, record: Dict[str, str], field: str) -> str:
        lowered = {key.lower(): value for key, value in record.items()}
        for alias in self.COLUMN_ALIASES[field]:
            value = lowered.get(alias.lower())
            if value:
                return value
        return ''

    def _check_required_columns(self, records: List[Dict[str, str]], data_type: str):
        columns = {name.lower() for name in records[0].keys()}
        for field in self.REQUIRED_FIELDS[data_type]:
            if any(alias.lower() in columns for alias in self.COLUMN_ALIASES[field]):
                return

        expected = sorted({alias for field in self.REQUIRED_FIELDS[data_type] for alias in self.COLUMN_ALIASES[field]})
        raise UploadParseError(
            f"No recognizable {data_type} columns found. Got: {', '.join(records[0].keys())}. "
            f"Expected at least one of: {', '.join(expected)}"
        )
