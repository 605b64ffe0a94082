"""Change records - one entry of the working tree status."""

import re
from dataclasses import dataclass

RENAME_SEPARATOR = ' -> '

TEST_TOKEN = '.test.'
CONTRACT_TOKEN = '.contract.'
LOGIC_TOKEN = '.logic.'
SCHEMA_TOKENS = ('.requirements.', '.specification.', '.instructions.')


@dataclass(frozen=True)
class ChangeRecord:
    """A single path with its two-character porcelain status.

    The first character is the index (staged) state, the second the
    worktree state. Either may be a space.
    """
    status_code: str
    path: str

    @property
    def index_state(self) -> str:
        return self.status_code[:1]

    @property
    def worktree_state(self) -> str:
        return self.status_code[1:2]

    @property
    def is_new(self) -> bool:
        return self.index_state == 'A' or self.status_code == '??'

    @property
    def is_modified(self) -> bool:
        return 'M' in self.status_code

    @property
    def is_deleted(self) -> bool:
        return self.index_state == 'D'


@dataclass(frozen=True)
class RoleFlags:
    """Which file roles appear in a set of paths, by naming convention."""
    has_tests: bool = False
    has_contracts: bool = False
    has_logic: bool = False
    has_schemas: bool = False

    @classmethod
    def from_paths(cls, paths: list[str]) -> 'RoleFlags':
        return cls(
            has_tests=any(TEST_TOKEN in p for p in paths),
            has_contracts=any(CONTRACT_TOKEN in p for p in paths),
            has_logic=any(LOGIC_TOKEN in p for p in paths),
            has_schemas=any(token in p for p in paths for token in SCHEMA_TOKENS),
        )


_C_ESCAPES = {'a': '\a', 'b': '\b', 't': '\t', 'n': '\n', 'v': '\v', 'f': '\f', 'r': '\r', '"': '"', '\\': '\\'}
_ESCAPE_RE = re.compile(r'\\([0-3][0-7]{2})|\\(.)', re.DOTALL)


def _unquote(path: str) -> str:
    """Undo git's C-style quoting of unusual paths.

    Octal escapes are raw UTF-8 bytes; everything else in the quoted
    string is already text (core.quotepath=false leaves it unescaped).
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    raw = bytearray()
    pos = 0
    for match in _ESCAPE_RE.finditer(body):
        raw += body[pos:match.start()].encode('utf-8', errors='surrogatepass')
        octal, char = match.groups()
        if octal:
            raw.append(int(octal, 8))
        else:
            raw += _C_ESCAPES.get(char, '\\' + char).encode('utf-8', errors='surrogatepass')
        pos = match.end()
    raw += body[pos:].encode('utf-8', errors='surrogatepass')
    return raw.decode('utf-8', errors='replace')


def parse_status_line(line: str) -> ChangeRecord | None:
    """Parse one 'git status --porcelain' line.

    The status prefix is kept exactly as reported, leading space included.
    Returns None for blank lines and lines without a path.
    """
    if not line.strip():
        return None
    status_code = line[:2]
    path = line[2:].lstrip(' ')
    if RENAME_SEPARATOR in path and status_code.strip()[:1] in ('R', 'C'):
        path = path.split(RENAME_SEPARATOR, 1)[1]
    path = _unquote(path.strip())
    if not path:
        return None
    return ChangeRecord(status_code=status_code, path=path)


def parse_status(output: str) -> list[ChangeRecord]:
    """Parse full porcelain output, keeping one record per distinct path."""
    records = []
    seen = set()
    for line in output.split('\n'):
        record = parse_status_line(line.rstrip('\r'))
        if record is None or record.path in seen:
            continue
        seen.add(record.path)
        records.append(record)
    return records
