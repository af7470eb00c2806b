import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional


def load_settings(config_file: Optional[Path], required: bool = True) -> Dict[str, Any]:
    try:
        if config_file:
            with open(config_file, 'r') as config_handle:
                return json.load(config_handle)
    except (OSError, ValueError) as e:
        if required:
            logging.error(f"Error loading config file {config_file}: {e}")
        return {}

    return {}
