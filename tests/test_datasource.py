import json

import pytest

from timeside_importer.core.importing.models import InputRecord
from timeside_importer.core.utils.datasource import read_import_records

ROWS = [
    {'title': 'Hey Jude', 'url': 'https://youtu.be/A_MjCqQoLLA', 'name': 'The Beatles', 'albumTitle': 'Hey Jude'},
    {'title': 'Local', 'url': 'audio/local.wav', 'name': 'Someone', 'albumTitle': 'Demo'},
]


def test_read_json(tmp_path):
    path = tmp_path / 'input.json'
    path.write_text(json.dumps(ROWS), encoding='utf-8')

    records = read_import_records(path)

    assert records == [
        InputRecord('Hey Jude', 'https://youtu.be/A_MjCqQoLLA', 'The Beatles', 'Hey Jude'),
        InputRecord('Local', 'audio/local.wav', 'Someone', 'Demo'),
    ]
    assert records[0].description == 'Music from The Beatles - Hey Jude'


def test_read_jsonl_skips_blank_lines(tmp_path):
    path = tmp_path / 'input.jsonl'
    path.write_text("\n".join(json.dumps(row) for row in ROWS) + "\n\n", encoding='utf-8')

    assert [r.title for r in read_import_records(path)] == ['Hey Jude', 'Local']


def test_read_csv(tmp_path):
    path = tmp_path / 'input.CSV'
    path.write_text(
        "title,url,name,albumTitle\n"
        "Hey Jude,https://youtu.be/A_MjCqQoLLA,The Beatles,Hey Jude\n"
        "1999,audio/local.wav,Prince,1999\n",
        encoding='utf-8'
    )

    records = read_import_records(path)

    assert records[1] == InputRecord('1999', 'audio/local.wav', 'Prince', '1999')


def test_incomplete_rows_are_kept_for_validation(tmp_path):
    path = tmp_path / 'input.json'
    path.write_text(json.dumps([{'title': 'Only title', 'album_title': ' Snake case '}]), encoding='utf-8')

    record = read_import_records(path)[0]

    assert record == InputRecord('Only title', '', '', 'Snake case')


def test_json_object_is_rejected(tmp_path):
    path = tmp_path / 'input.json'
    path.write_text(json.dumps(ROWS[0]), encoding='utf-8')

    with pytest.raises(ValueError):
        read_import_records(path)


def test_unsupported_format_is_rejected(tmp_path):
    path = tmp_path / 'input.txt'
    path.write_text("title", encoding='utf-8')

    with pytest.raises(ValueError):
        read_import_records(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_import_records(tmp_path / 'missing.json')
