"""Read student names from roster files for bulk enrollment."""
import csv
import json
from pathlib import Path


def _lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines()]


def read_roster_text(file_path: str) -> list[str]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in (".txt", ".md"):
        return _lines(path.read_text())
    elif suffix == ".csv":
        with path.open(newline="") as f:
            return [row[0] for row in csv.reader(f) if row]
    elif suffix == ".json":
        data = json.loads(path.read_text())
        if isinstance(data, dict):
            data = data.get("students", [])
        return [str(item["name"] if isinstance(item, dict) else item) for item in data]
    elif suffix in (".yaml", ".yml"):
        import yaml
        data = yaml.safe_load(path.read_text()) or []
        if isinstance(data, dict):
            data = data.get("students", [])
        return [str(item["name"] if isinstance(item, dict) else item) for item in data]
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return _lines("\n".join(page.extract_text() or "" for page in reader.pages))
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return [p.text for p in doc.paragraphs]
    elif suffix in (".html", ".htm"):
        from bs4 import BeautifulSoup
        soup = BeautifulSoup(path.read_text(), "html.parser")
        items = soup.find_all("li")
        if items:
            return [li.get_text() for li in items]
        return _lines(soup.get_text())
    else:
        # Try reading as plain text
        return _lines(path.read_text())


def read_roster_names(file_path: str) -> list[str]:
    """Return the non-blank names in a roster file, stripped, in file order."""
    return [name.strip() for name in read_roster_text(file_path) if name and name.strip()]
