"""Utility functions for caridentmedix"""
import json
import logging
import os
import importlib.resources as resources
from typing import List

from .matching.models import Clinic

logger = logging.getLogger(__name__)


def resolve_templates_dir() -> str:
    """
    Resolves the path to the SQL templates directory.
    Handles both installed package and source checkout layouts.

    Returns:
        str: Absolute path to the sql_templates directory

    Raises:
        RuntimeError: If the sql_templates directory cannot be found
    """
    # Installed package
    try:
        templates = resources.files('caridentmedix.sql_templates')
        templates_str = str(templates)
        if os.path.isdir(templates_str):
            logger.debug(f"Found templates via package resources: {templates_str}")
            return templates_str
    except (ModuleNotFoundError, TypeError) as e:
        logger.debug(f"resources.files() failed: {e}")

    # Source checkout, next to this file
    dev_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "sql_templates")
    if os.path.isdir(dev_path):
        logger.debug(f"Found templates dir: {dev_path}")
        return dev_path

    raise RuntimeError(
        "Could not locate the sql_templates directory (checked package resources and "
        f"{dev_path}). Please ensure it exists and is readable."
    )


def read_clinics_from_json(json_file_path: str, logger: logging.Logger) -> List[Clinic]:
    """
    Reads clinics from a JSON file instead of the database.

    The file holds an array of clinic objects. Keys may be camelCase (as exported
    by the web API) or snake_case; each clinic may carry a nested "dentists" array.

    Args:
        json_file_path (str): Path to the JSON file
        logger (logging.Logger): Logger for error reporting

    Returns:
        List[Clinic]: The clinics in file order

    Raises:
        OSError: If the file cannot be read
        ValueError: If the file is not valid JSON or not an array of objects
    """
    if not os.path.exists(json_file_path):
        logger.error(f"JSON file not found: {json_file_path}")
        raise FileNotFoundError(json_file_path)

    try:
        with open(json_file_path, mode='r', encoding='utf-8-sig') as infile:  # utf-8-sig for BOM
            payload = json.load(infile)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in '{json_file_path}': {e}")
        raise ValueError(f"Invalid JSON in '{json_file_path}': {e}") from e

    # Accept the {"data": [...]} envelope written by the json output format
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        payload = payload["data"]

    if not isinstance(payload, list) or not all(isinstance(item, dict) for item in payload):
        logger.error(f"JSON file '{json_file_path}' must contain an array of clinic objects.")
        raise ValueError(f"JSON file '{json_file_path}' must contain an array of clinic objects.")

    clinics = [Clinic.from_dict(item) for item in payload]
    if not clinics:
        logger.warning(f"No clinics found in '{json_file_path}'.")
    else:
        logger.info(f"Successfully read {len(clinics)} clinics from '{json_file_path}'.")
    return clinics
