import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

SEED_FILES = {
    'users': 'user.seed.json',
    'patients': 'patient.seed.json',
    'encounters': 'encounter.seed.json',
    'appointments': 'appointment.seed.json',
    'studies': 'studies.seed.json',
    'results': 'results.seed.json',
    'licenses': 'licenses.seed.json',
}
DISCARDED_DIR = 'discarded'


def _dump(path: Path, data) -> None:
    with path.open('w', encoding='utf-8') as fh:
        json.dump(data, fh, indent=2, ensure_ascii=False)


def clean_seeds_dir(seeds_dir) -> None:
    seeds_dir = Path(seeds_dir)
    for path in seeds_dir.glob('*.seed.json'):
        path.unlink()
    for path in (seeds_dir / DISCARDED_DIR).glob('*.json'):
        path.unlink()


def write_seeds(seeds_dir, data: dict, discarded: dict) -> list:
    """Write one file per entity; discarded rows only when there are any."""
    seeds_dir = Path(seeds_dir)
    seeds_dir.mkdir(parents=True, exist_ok=True)
    written = []
    for key, filename in SEED_FILES.items():
        _dump(seeds_dir / filename, data.get(key, []))
        written.append(seeds_dir / filename)

    rows = {name: items for name, items in discarded.items() if items}
    if rows:
        (seeds_dir / DISCARDED_DIR).mkdir(exist_ok=True)
        for name, items in rows.items():
            path = seeds_dir / DISCARDED_DIR / f'{name}.json'
            _dump(path, items)
            written.append(path)
    logger.info('seeds_written dir=%s files=%s', seeds_dir, len(written))
    return written


def load_seed(seeds_dir, key: str) -> list:
    path = Path(seeds_dir) / SEED_FILES[key]
    with path.open(encoding='utf-8') as fh:
        return json.load(fh)
