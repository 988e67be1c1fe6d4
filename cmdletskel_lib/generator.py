import os
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Tuple

PLACEHOLDER_PATTERN = re.compile(r"\$\{([a-zA-Z0-9_\-\.]+)\}")
PARAMETER_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
FUNCTION_NAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")

DEFAULT_REQUIRES_VERSION = "2.0"
SCAFFOLD_VERSION = "1.0"
MAX_SPEC_ITEMS = 5

_TRUE_WORDS = {"true", "$true", "yes", "1"}
_FALSE_WORDS = {"false", "$false", "no", "0"}

SCAFFOLD_TEMPLATE = """\
#requires -Version ${requires_version}

Function ${name}
{
<#
.SYNOPSIS
    ${synopsis}

.DESCRIPTION
    ${description}
${parameter_help}
.EXAMPLE
    ${name}

.NOTES
    Version: ${version}
    Author:  ${author}
#>
    [CmdletBinding(SupportsShouldProcess=${supports_should_process})]
    Param
    (
${declarations}
    )

${begin_block}

${process_block}

${end_block}
}
"""


class ScaffoldError(Exception):
    """Base class for scaffold generation failures."""


class InvalidSpecError(ScaffoldError, ValueError):
    """A parameter entry has no usable type descriptor or attribute values."""

    def __init__(self, parameter: Any, message: str) -> None:
        super().__init__(f"Invalid specification for parameter {parameter!r}: {message}")
        self.parameter = parameter


class InvalidInputTypeError(ScaffoldError, TypeError):
    """The parameter specification is not a mapping."""


@dataclass(frozen=True)
class ParameterAttributes:
    """Normalized view of one parameter entry.

    Optional attributes are None when the caller did not supply them, which is
    distinct from an explicit False or 0.
    """

    name: str
    type_name: str
    mandatory: Optional[bool] = None
    from_pipeline: Optional[bool] = None
    from_pipeline_by_property_name: Optional[bool] = None
    position: Optional[int] = None

    def present_attributes(self) -> List[Tuple[str, Any]]:
        # Position first, then the binding switches, as PowerShell authors write them
        pairs = [
            ("Position", self.position),
            ("Mandatory", self.mandatory),
            ("ValueFromPipeline", self.from_pipeline),
            ("ValueFromPipelineByPropertyName", self.from_pipeline_by_property_name),
        ]
        return [(k, v) for k, v in pairs if v is not None]


# Field order of the list form: [type, mandatory, fromPipeline, fromPipelineByPropertyName, position]
_SEQUENCE_FIELDS = ("mandatory", "from_pipeline", "from_pipeline_by_property_name", "position")


def _coerce_bool(parameter: str, field: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise InvalidSpecError(parameter, f"{field} must be a boolean, got {value!r}")


def _coerce_position(parameter: str, value: Any) -> int:
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
        raise InvalidSpecError(parameter, f"position must be an integer, got {value!r}")
    try:
        position = int(str(value).strip()) if isinstance(value, str) else int(value)
    except (TypeError, ValueError):
        raise InvalidSpecError(parameter, f"position must be an integer, got {value!r}") from None
    if position < 0:
        raise InvalidSpecError(parameter, f"position must not be negative, got {position}")
    return position


def _coerce_type(parameter: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidSpecError(parameter, "a non-empty type descriptor is required")
    return value.strip()


def _build_record(name: str, type_value: Any, supplied: Mapping[str, Any]) -> ParameterAttributes:
    fields: dict = {}
    for field, raw in supplied.items():
        if field == "position":
            fields[field] = _coerce_position(name, raw)
        else:
            fields[field] = _coerce_bool(name, field, raw)
    return ParameterAttributes(name=name, type_name=_coerce_type(name, type_value), **fields)


def normalize_parameter(name: Any, value: Any) -> ParameterAttributes:
    """
    Interpret one entry of the parameter mapping.

    Accepted values:
    - "string[]"                                   type only, no attributes
    - ["string[]", True, True, False, 0]           list form, trailing items optional
    - {"type": "string[]", "mandatory": True, ...} mapping form, keys as in ParameterAttributes

    An attribute is present when its slot exists in the list (or its key in the mapping),
    regardless of whether the value is falsy.
    """
    if not isinstance(name, str) or not PARAMETER_NAME_PATTERN.match(name):
        raise InvalidSpecError(
            name, "parameter names must be identifiers (letters, digits, underscore)"
        )

    if isinstance(value, str) or value is None:
        return ParameterAttributes(name=name, type_name=_coerce_type(name, value))

    if isinstance(value, Mapping):
        unknown = set(value) - set(_SEQUENCE_FIELDS) - {"type"}
        if unknown:
            raise InvalidSpecError(name, f"unknown keys {sorted(unknown)}")
        supplied = {k: value[k] for k in _SEQUENCE_FIELDS if k in value}
        return _build_record(name, value.get("type"), supplied)

    if isinstance(value, (list, tuple)):
        if not value:
            raise InvalidSpecError(name, "a non-empty type descriptor is required")
        if len(value) > MAX_SPEC_ITEMS:
            raise InvalidSpecError(
                name, f"expected at most {MAX_SPEC_ITEMS} items, got {len(value)}"
            )
        supplied = dict(zip(_SEQUENCE_FIELDS, value[1:]))
        return _build_record(name, value[0], supplied)

    raise InvalidSpecError(name, f"unsupported specification {value!r}")


def normalize_parameters(parameters: Optional[Mapping[str, Any]]) -> List[ParameterAttributes]:
    if parameters is None:
        return []
    if not isinstance(parameters, Mapping):
        raise InvalidInputTypeError(
            f"parameters must be a mapping of name to specification, got {type(parameters).__name__}"
        )
    records = []
    seen: dict = {}
    for k, v in parameters.items():
        record = normalize_parameter(k, v)
        # PowerShell parameter names are case-insensitive
        folded = record.name.lower()
        if folded in seen:
            raise InvalidSpecError(k, f"duplicates parameter {seen[folded]!r}")
        seen[folded] = k
        records.append(record)
    return records


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "$true" if value else "$false"
    return str(value)


def _render_declaration(record: ParameterAttributes) -> str:
    attrs = ", ".join(f"{k}={_format_value(v)}" for k, v in record.present_attributes())
    return f"        [Parameter({attrs})]\n        [{record.type_name}]${record.name}"


def render_parameter_block(records: Sequence[ParameterAttributes]) -> Tuple[str, str]:
    """Return (declarations, help stubs) for the records, both in record order."""
    declarations = ",\n\n".join(_render_declaration(r) for r in records)
    help_stubs = "\n".join(f".PARAMETER {r.name}\n" for r in records)
    return declarations, help_stubs


def _render_string(template: str, context: Mapping[str, Any]) -> str:
    def repl(match: re.Match[str]) -> str:
        return str(context[match.group(1)])

    # Single pass: substituted values are never re-scanned for placeholders
    return PLACEHOLDER_PATTERN.sub(repl, template)


def _render_lifecycle_block(keyword: str, name: str, code: str, closing_trace: bool = False) -> str:
    lines = [
        f"    {keyword}",
        "    {",
        f'        Write-Verbose "{name}: {keyword}"',
    ]
    if code:
        lines.append(f"        {code}")
    if closing_trace:
        lines.append(f'        Write-Verbose "{name}: Finished"')
    lines.append("    }")
    return "\n".join(lines)


def compose_scaffold(
    name: str,
    records: Sequence[ParameterAttributes],
    should_support_confirmation: bool = False,
    synopsis: str = "",
    description: str = "",
    begin_code: str = "",
    process_code: str = "",
    end_code: str = "",
    author: str = "",
    requires_version: str = DEFAULT_REQUIRES_VERSION,
) -> str:
    """
    Assemble the complete function scaffold.

    Code snippets are spliced in verbatim: no escaping and no re-indentation beyond the
    first line. A snippet that unbalances braces produces broken output.
    """
    declarations, help_stubs = render_parameter_block(records)
    context = {
        "requires_version": requires_version,
        "name": name,
        "synopsis": synopsis,
        "description": description,
        "parameter_help": f"\n{help_stubs}" if help_stubs else "",
        "version": SCAFFOLD_VERSION,
        "author": author,
        "supports_should_process": _format_value(bool(should_support_confirmation)),
        "declarations": declarations,
        "begin_block": _render_lifecycle_block("Begin", name, begin_code),
        "process_block": _render_lifecycle_block("Process", name, process_code),
        "end_block": _render_lifecycle_block("End", name, end_code, closing_trace=True),
    }
    return _render_string(SCAFFOLD_TEMPLATE, context)


def environment_author() -> str:
    return os.environ.get("USERNAME") or os.environ.get("USER", "")


class FileSink:
    """Delivery sink that writes the scaffold to a file."""

    def __init__(self, path: str) -> None:
        self.path = path

    def deliver(self, text: str) -> None:
        dir_path = os.path.dirname(self.path)
        if dir_path:
            os.makedirs(dir_path, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(text)


def new_function(
    name: str,
    parameters: Optional[Mapping[str, Any]] = None,
    should_support_confirmation: bool = False,
    synopsis: str = "",
    description: str = "",
    begin_code: str = "",
    process_code: str = "",
    end_code: str = "",
    deliver_to_editor: bool = False,
    editor_sink: Optional[Any] = None,
    author_provider: Optional[Callable[[], str]] = None,
    requires_version: str = DEFAULT_REQUIRES_VERSION,
    author: Optional[str] = None,
) -> Optional[str]:
    """
    Generate the scaffold of a new advanced function.

    All parameter entries are validated before any text is produced, so a bad entry
    aborts the call without output.

    When deliver_to_editor is set and an editor_sink (any object with a deliver(text)
    method) is supplied, the scaffold is handed to the sink and None is returned.
    Without a sink the scaffold is returned as text.
    """
    if not isinstance(name, str) or not FUNCTION_NAME_PATTERN.match(name):
        raise ValueError(
            f"Function name must be an identifier such as Verb-Noun, got {name!r}"
        )
    records = normalize_parameters(parameters)

    if author is None:
        author = (author_provider or environment_author)()

    text = compose_scaffold(
        name,
        records,
        should_support_confirmation=should_support_confirmation,
        synopsis=synopsis or "",
        description=description or "",
        begin_code=begin_code or "",
        process_code=process_code or "",
        end_code=end_code or "",
        author=author or "",
        requires_version=requires_version,
    )

    if deliver_to_editor and editor_sink is not None:
        editor_sink.deliver(text)
        return None
    return text
