from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

try:
    import yaml  # type: ignore
except Exception as e:  # pragma: no cover
    raise RuntimeError(
        "PyYAML is required to read request files. Please install it: pip install pyyaml"
    ) from e

from .generator import DEFAULT_REQUIRES_VERSION, InvalidInputTypeError, new_function

# Request file key -> ScaffoldRequest attribute
REQUEST_KEYS = {
    "name": "name",
    "parameters": "parameters",
    "confirm": "should_support_confirmation",
    "synopsis": "synopsis",
    "description": "description",
    "begin": "begin_code",
    "process": "process_code",
    "end": "end_code",
    "requires_version": "requires_version",
    "author": "author",
}


@dataclass
class ScaffoldRequest:
    name: str = ""
    parameters: Dict[str, Any] = field(default_factory=dict)
    should_support_confirmation: bool = False
    synopsis: str = ""
    description: str = ""
    begin_code: str = ""
    process_code: str = ""
    end_code: str = ""
    requires_version: str = DEFAULT_REQUIRES_VERSION
    author: Optional[str] = None

    def render(self, **overrides: Any) -> Optional[str]:
        """Call new_function with this request's fields; keyword arguments take precedence."""
        options: Dict[str, Any] = {
            "should_support_confirmation": self.should_support_confirmation,
            "synopsis": self.synopsis,
            "description": self.description,
            "begin_code": self.begin_code,
            "process_code": self.process_code,
            "end_code": self.end_code,
            "requires_version": self.requires_version,
            "author": self.author,
        }
        options.update(overrides)
        return new_function(self.name, self.parameters, **options)


def _split_spec(spec: str) -> List[str]:
    # Commas inside brackets belong to the type, e.g. Dictionary[string,int]
    parts: List[str] = []
    depth = 0
    current = ""
    for ch in spec:
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            parts.append(current.strip())
            current = ""
            continue
        current += ch
    parts.append(current.strip())
    return parts


def parse_params(param_args: Optional[Sequence[str]]) -> Dict[str, Any]:
    """
    Parse a sequence of -p arguments into a parameter specification mapping.

    Accepted forms per item:
    - Name=string[]
    - Name:string[]
    - Name=string[],true,true,false,0   (type followed by up to four attribute values)

    Order of first appearance is kept; a repeated name replaces the earlier specification.
    Values are left as text and coerced when the scaffold is generated.
    """
    result: Dict[str, Any] = {}
    if not param_args:
        return result

    for raw in param_args:
        if raw is None:
            continue
        s = str(raw).strip()
        if not s:
            continue

        # Allow quotes around the entire token
        if (s.startswith('"') and s.endswith('"')) or (s.startswith("'") and s.endswith("'")):
            s = s[1:-1]

        # Split on whichever separator comes first so types may contain the other one
        positions = [i for i in (s.find("="), s.find(":")) if i > 0]
        if not positions:
            raise ValueError(f"Invalid -p parameter format: {raw!r}. Expect Name=type[,attributes].")
        idx = min(positions)
        key, val = s[:idx].strip(), s[idx + 1:].strip()
        if not key or not val:
            raise ValueError(f"Invalid -p parameter format: {raw!r}. Expect Name=type[,attributes].")

        parts = _split_spec(val)
        result[key] = parts[0] if len(parts) == 1 else parts

    return result


def _load_yaml(path: str) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def request_from_mapping(data: Any) -> ScaffoldRequest:
    if not isinstance(data, Mapping):
        raise InvalidInputTypeError("A request must be a mapping at the top level")
    unknown = set(data) - set(REQUEST_KEYS)
    if unknown:
        raise ValueError(f"Unknown request keys: {', '.join(sorted(map(str, unknown)))}")

    request = ScaffoldRequest()
    for key, attr in REQUEST_KEYS.items():
        if key not in data or data[key] is None:
            continue
        value = data[key]
        if key == "parameters":
            if not isinstance(value, Mapping):
                raise InvalidInputTypeError("'parameters' must be a mapping of name to specification")
            value = dict(value)
        elif key == "confirm":
            if not isinstance(value, bool):
                raise ValueError(f"'confirm' must be true or false, got {value!r}")
        else:
            # YAML reads 2.0 as a float; keep every text field as text
            value = str(value)
        setattr(request, attr, value)
    return request


def load_request(path: str) -> ScaffoldRequest:
    """Read a YAML request file. The file's 'parameters' order is kept."""
    return request_from_mapping(_load_yaml(path))


def request_to_mapping(request: ScaffoldRequest) -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for key, attr in REQUEST_KEYS.items():
        value = getattr(request, attr)
        if value is None or value == "" or value == {}:
            continue
        if key == "parameters":
            value = {k: list(v) if isinstance(v, tuple) else v for k, v in value.items()}
        data[key] = value
    data.setdefault("name", request.name)
    return data


def save_request(request: ScaffoldRequest, output_path: str) -> None:
    """Write the request as YAML so it can be fed back with --request."""

    # Dump YAML ensuring multiline strings (like code snippets) use literal block style (|)
    class _LiteralSafeDumper(yaml.SafeDumper):
        pass

    def _str_presenter(dumper: yaml.SafeDumper, data: str):  # type: ignore[name-defined]
        style = '|' if ('\n' in data) else None
        return dumper.represent_scalar('tag:yaml.org,2002:str', data, style=style)

    _LiteralSafeDumper.add_representer(str, _str_presenter)  # type: ignore[arg-type]

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.dump(request_to_mapping(request), f, Dumper=_LiteralSafeDumper, sort_keys=False, allow_unicode=True)
