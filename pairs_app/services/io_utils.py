"""
Utilitaires IO JSON (rapides) basés sur orjson.
- read_json(Path)  → Any | None (None si fichier manquant)
- write_json(Path, data) → écrit en binaire (création des dossiers si besoin)
- remove_tree(Path) → supprime un dossier de session (silencieux s'il est absent)

Attention:
- orjson renvoie/attend des bytes; on lit/écrit en mode binaire.
- write_json ne met pas d'indentation ; les emojis sont écrits en UTF-8 brut.
"""
import orjson as json
import shutil
from pathlib import Path
from typing import Any


def read_json(path: Path) -> Any:
    """Lit un fichier JSON (ou None s'il n'existe pas)."""
    if not path.exists():
        return None
    with path.open("rb") as f:
        return json.loads(f.read())


def write_json(path: Path, data: Any) -> None:
    """Écrit un fichier JSON de manière sûre (dossier parent créé si absent)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    with tmp.open("wb") as f:
        f.write(json.dumps(data))
    tmp.replace(path)


def remove_tree(path: Path) -> None:
    if path.exists():
        shutil.rmtree(path)
