"""Zone membership file loading.

Zone membership can be kept in a YAML file instead of being passed on the
command line:

```yaml
VPC:
  - crn:v1:bluemix:public:is:us-south:a/abc::vpc:r006-1234
Address:
  - 10.0.0.1
  - 10.0.0.1-10.0.0.5
  - 10.0.0.0/24
ServiceRef:
  - cloud-object-storage
```
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from cbr_client.models import ZoneSpec


def load_zone_spec(path: str | Path) -> ZoneSpec:
    """Load a zone membership specification from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed ZoneSpec.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a valid membership mapping.
    """
    path = Path(path)
    if not path.exists():
        msg = f"Zone spec file not found: {path}"
        raise FileNotFoundError(msg)

    with path.open() as f:
        try:
            data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {path}: {e}"
            raise ValueError(msg) from e

    if data is None:
        return ZoneSpec()
    if not isinstance(data, dict):
        msg = f"Zone spec in {path} must be a mapping, got {type(data).__name__}"
        raise ValueError(msg)

    try:
        return ZoneSpec.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid zone spec in {path}: {e}"
        raise ValueError(msg) from e
