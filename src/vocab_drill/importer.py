"""Import extra vocabulary topics from files."""
import csv
import json
import re
from pathlib import Path

import yaml

from vocab_drill.db import get_connection
from vocab_drill.seed import insert_topic

# "term (category): meaning" or "term: meaning"
LINE_PATTERN = re.compile(r"^\s*(?P<term>[^:()]+?)\s*(?:\((?P<category>[^)]*)\))?\s*:\s*(?P<meaning>.+?)\s*$")


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")
    return slug or "topic"


def _normalize_records(records) -> list[dict]:
    if isinstance(records, dict):
        records = records.get("terms", [])
    if not isinstance(records, list):
        raise ValueError("Expected a list of terms")
    terms = []
    for rec in records:
        if not isinstance(rec, dict):
            raise ValueError(f"Bad term entry: {rec!r}")
        text = rec.get("term", rec.get("text"))
        meaning = rec.get("definition", rec.get("meaning"))
        if not text or not meaning:
            raise ValueError(f"Term entry needs a term and a meaning: {rec!r}")
        terms.append({
            "term": str(text).strip(),
            "type": str(rec.get("type", rec.get("category", "")) or "").strip(),
            "definition": str(meaning).strip(),
        })
    return terms


def read_terms(file_path: str) -> list[dict]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _normalize_records(json.loads(path.read_text(encoding="utf-8")))
    elif suffix in (".yaml", ".yml"):
        return _normalize_records(yaml.safe_load(path.read_text(encoding="utf-8")))
    elif suffix in (".csv", ".tsv"):
        delimiter = "\t" if suffix == ".tsv" else ","
        with open(path, newline="", encoding="utf-8") as f:
            rows = [row for row in csv.reader(f, delimiter=delimiter) if any(cell.strip() for cell in row)]
        if rows and [c.strip().lower() for c in rows[0][:3]] == ["term", "category", "meaning"]:
            rows = rows[1:]
        records = []
        for row in rows:
            if len(row) < 3:
                raise ValueError(f"Expected term, category, meaning columns: {row!r}")
            records.append({"term": row[0], "type": row[1], "definition": row[2]})
        return _normalize_records(records)
    else:
        # One term per line
        records = []
        for line in path.read_text(encoding="utf-8").splitlines():
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            match = LINE_PATTERN.match(line)
            if not match:
                raise ValueError(f"Cannot parse line: {line!r}")
            records.append({
                "term": match["term"],
                "type": match["category"] or "",
                "definition": match["meaning"],
            })
        return _normalize_records(records)


def import_file(db_path: str, file_path: str, topic_name: str | None = None) -> dict:
    """Add a new topic built from a file. The topic name defaults to the file stem."""
    terms = read_terms(file_path)
    if not terms:
        raise ValueError(f"No terms found in {Path(file_path).name}")
    name = topic_name or Path(file_path).stem.replace("_", " ").title()
    topic_id = slugify(name)
    conn = get_connection(db_path)
    try:
        exists = conn.execute("SELECT 1 FROM topics WHERE id = ?", (topic_id,)).fetchone()
        if exists:
            raise ValueError(f"Topic '{topic_id}' already exists")
        insert_topic(conn, topic_id, name, [dict(t, id=i) for i, t in enumerate(terms, 1)])
        conn.commit()
    finally:
        conn.close()
    return {"topic_id": topic_id, "name": name, "term_count": len(terms)}
