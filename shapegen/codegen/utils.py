import builtins
import html
import keyword
import re
import textwrap
import unicodedata
from urllib.parse import urlparse

from pydantic import BaseModel

__all__ = (
    'capitalize_first',
    'clean_docstring',
    'field_name',
    'is_url',
    'sanitize_identifier',
    'to_snake_case',
    'type_name',
)

_FIRST_CAP_RE = re.compile(r'(.)([A-Z][a-z]+)')
_ALL_CAP_RE = re.compile(r'([a-z0-9])([A-Z])')

# Names a generated module binds itself; shapes may not shadow them.
GENERATED_MODULE_NAMES = frozenset(
    {
        'BaseModel',
        'ConfigDict',
        'CredentialsProvider',
        'Field',
        'HttpxDispatcher',
        'MissingParameterError',
        'Params',
        'RequestDispatcher',
        'ServiceError',
        'SignedRequest',
        'XmlResponse',
    }
)

_RESERVED_TYPE_NAMES = GENERATED_MODULE_NAMES | set(dir(builtins))
# Annotation names used inside generated model bodies.
_ANNOTATION_NAMES = {'bool', 'bytes', 'dict', 'float', 'int', 'list', 'str'}

_RESERVED_FIELD_NAMES = (
    set(keyword.kwlist)
    | _ANNOTATION_NAMES
    | {name for name in dir(BaseModel) if not name.startswith('_')}
)


def capitalize_first(input_string):
    if not input_string:
        return ''
    return input_string[0].upper() + input_string[1:]


def is_url(text):
    try:
        result = urlparse(text)
        return result.scheme in ('http', 'https') and bool(result.netloc)
    except (TypeError, ValueError):
        return False


def remove_accents(input_str):
    nfkd_form = unicodedata.normalize('NFKD', input_str)
    return ''.join(c for c in nfkd_form if not unicodedata.combining(c))


def to_snake_case(name: str) -> str:
    """Convert a PascalCase or dashed wire name to snake_case.

    Acronyms stay together: ``SSECustomerKeyMD5`` becomes
    ``sse_customer_key_md5`` and ``ID`` becomes ``id``.
    """
    converted = _FIRST_CAP_RE.sub(r'\1_\2', remove_accents(name))
    converted = _ALL_CAP_RE.sub(r'\1_\2', converted)
    return re.sub(r'[^A-Za-z0-9]+', '_', converted).strip('_').lower()


def field_name(member_name: str) -> str:
    """Python attribute name for a structure member.

    Keywords and attributes of pydantic's ``BaseModel`` get a trailing
    underscore; names starting with a digit get a ``field_`` prefix.
    """
    if not member_name:
        raise ValueError('Name cannot be empty')

    sanitized = to_snake_case(member_name)
    if sanitized and sanitized[0].isdigit():
        sanitized = f'field_{sanitized}'
    if sanitized in _RESERVED_FIELD_NAMES:
        sanitized = f'{sanitized}_'
    return sanitized


def sanitize_identifier(name: str) -> str:
    """Convert a string into a valid PascalCase Python identifier.

    - Replace spaces and hyphens with underscores
    - Remove other invalid characters
    - Ensure it doesn't start with a digit
    """
    if not name:
        return 'UnnamedType'

    parts = re.sub(r'[^A-Za-z0-9]+', '_', remove_accents(name)).split('_')

    if len(parts) == 1:
        sanitized = parts[0]
    else:
        sanitized = ''.join(capitalize_first(part) for part in parts if part)

    if sanitized and sanitized[0].isdigit():
        sanitized = '_' + sanitized

    return sanitized or 'UnnamedType'


def type_name(shape_name: str, reserved: frozenset[str] | set[str] = frozenset()) -> str:
    """Python class name for a shape.

    Shapes whose name would shadow a builtin, a name the generated module
    imports, or one of ``reserved`` get a ``Shape`` suffix.
    """
    name = sanitize_identifier(shape_name)
    if name in _RESERVED_TYPE_NAMES or name in reserved:
        name = f'{name}Shape'
    return name


def clean_docstring(documentation: str | None) -> str | None:
    """Turn HTML service documentation into plain docstring text."""
    if not documentation:
        return None

    text = re.sub(r'</?p>', '\n\n', documentation)
    text = re.sub(r'<[^>]+>', '', text)
    text = html.unescape(text)

    paragraphs = []
    for paragraph in re.split(r'\n\s*\n', text):
        paragraph = ' '.join(paragraph.split())
        if paragraph:
            paragraphs.append(textwrap.fill(paragraph, width=79))
    return '\n\n'.join(paragraphs) or None
