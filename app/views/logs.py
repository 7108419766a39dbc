"""Admin view of grading activity, read back from the rotating log files.

Service loggers write ``key=value`` tokens (``team=3 question=12``) into
their messages; those are exposed as ``fields`` and can be filtered on.
"""
from __future__ import annotations

import os
import re

from flask import Blueprint, current_app, jsonify, request

from app.views.admin import admin_required

logs_bp = Blueprint('logs', __name__, url_prefix='/admin/logs')

#   2026-02-19 10:30:45,123 [INFO] app.services.grading_service: message
_RECORD_START_RE = re.compile(
    r'^(?P<time>\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2},\d+)\s+'
    r'\[(?P<level>\w+)]\s+'
    r'(?P<source>[\w.]+):\s+'
    r'(?P<message>.*)',
)
_FIELD_RE = re.compile(r'\b(\w+)=([^\s:,()]+)')

_LEVEL_ORDER = {'DEBUG': 0, 'INFO': 1, 'WARNING': 2, 'ERROR': 3, 'CRITICAL': 4}

DEFAULT_LIMIT = 1000
MAX_LIMIT = 5000


def log_files():
    """Existing log files, oldest rotation first, ``app.log`` last."""
    base = os.path.join(current_app.instance_path, 'logs', 'app.log')
    backups = current_app.config.get('LOG_FILE_BACKUP_COUNT', 0)
    candidates = [f'{base}.{i}' for i in range(backups, 0, -1)] + [base]
    return [path for path in candidates if os.path.isfile(path)]


def _iter_records(lines):
    record = None
    for line in lines:
        m = _RECORD_START_RE.match(line)
        if m:
            if record is not None:
                yield record
            record = m.groupdict()
            record['fields'] = dict(_FIELD_RE.findall(record['message']))
        elif record is not None:
            # traceback continuation
            record['message'] += '\n' + line.rstrip('\n')
    if record is not None:
        yield record


def _matches(record, min_level, keyword, fields):
    if _LEVEL_ORDER.get(record['level'], 0) < min_level:
        return False
    if keyword and keyword not in record['message'].lower() \
            and keyword not in record['source'].lower():
        return False
    return all(record['fields'].get(k) == v for k, v in fields.items())


def read_log_entries(limit=DEFAULT_LIMIT, level=None, keyword=None, team=None, question=None):
    """Log records matching every given filter, newest first.

    ``team`` and ``question`` match the ``team=`` and ``question=`` fields
    written by the grading and scoring services.
    """
    min_level = _LEVEL_ORDER.get(level.upper(), 0) if level else 0
    keyword = keyword.strip().lower() if keyword else None
    fields = {k: str(v) for k, v in (('team', team), ('question', question)) if v}

    matched = []
    for path in log_files():
        try:
            with open(path, 'r', encoding='utf-8', errors='replace') as f:
                matched.extend(
                    r for r in _iter_records(f) if _matches(r, min_level, keyword, fields)
                )
        except OSError:
            continue

    matched.reverse()
    return matched[:max(0, limit)]


@logs_bp.route('/')
@admin_required
def index():
    limit = request.args.get('lines', DEFAULT_LIMIT, type=int)
    limit = min(max(1, limit), MAX_LIMIT)
    entries = read_log_entries(
        limit=limit,
        level=request.args.get('level', ''),
        keyword=request.args.get('keyword', ''),
        team=request.args.get('team', ''),
        question=request.args.get('question', ''),
    )
    return jsonify({'total': len(entries), 'logs': entries})
