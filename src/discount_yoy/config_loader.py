"""
Configuration loader for the discount report.

Loads settings from YAML config files.
"""

import os

import yaml

from .loader import SUPPORTED_FORMATS


def load_settings(config_dir, settings_file='settings.yaml'):
    """Load main settings from settings.yaml (or specified file)."""
    settings_path = os.path.join(config_dir, settings_file)

    if not os.path.exists(settings_path):
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with open(settings_path, 'r', encoding='utf-8') as f:
        settings = yaml.safe_load(f)

    if settings is None:
        return {}
    if not isinstance(settings, dict):
        raise ValueError(f"Settings file must contain a mapping: {settings_path}")
    return settings


def resolve_source(source):
    """
    Validate a data source entry and fill in defaults.

    Returns a copy of the source with 'name', 'format' and
    'decimal_separator' set.
    """
    if isinstance(source, str):
        source = {'file': source}
    elif not isinstance(source, dict):
        raise ValueError(f"Invalid data source entry: {source!r}")

    source = source.copy()

    if not source.get('file'):
        raise ValueError(f"Data source '{source.get('name', 'unknown')}' must specify 'file'")

    source.setdefault('name', os.path.basename(source['file']))

    file_format = source.get('format')
    if not file_format:
        file_format = os.path.splitext(source['file'])[1].lstrip('.')
    file_format = file_format.lower()
    if file_format not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Unknown format '{file_format}' for source '{source['name']}'. "
            f"Use one of: {', '.join(SUPPORTED_FORMATS)}"
        )
    source['format'] = file_format

    separator = str(source.get('decimal_separator', '.'))
    if separator not in ('.', ','):
        raise ValueError(f"decimal_separator for source '{source['name']}' must be '.' or ','")
    source['decimal_separator'] = separator

    return source


def resolve_source_path(source, config_dir):
    """Locate a source file relative to the config directory's parent, then the config directory."""
    filepath = os.path.normpath(os.path.join(config_dir, '..', source['file']))
    if not os.path.exists(filepath):
        filepath = os.path.normpath(os.path.join(config_dir, source['file']))
    return filepath


def load_config(config_dir, settings_file='settings.yaml'):
    """Load all configuration.

    Args:
        config_dir: Path to config directory containing settings.yaml
        settings_file: Name of the settings file to load (default: settings.yaml)

    Returns:
        dict with all configuration values
    """
    config_dir = os.path.abspath(config_dir)

    if not os.path.isdir(config_dir):
        raise FileNotFoundError(f"Config directory not found: {config_dir}")

    config = load_settings(config_dir, settings_file)

    config['data_sources'] = [
        resolve_source(source)
        for source in config.get('data_sources') or []
    ]

    # Single format may be given as a plain string
    date_formats = config.get('date_formats') or []
    if isinstance(date_formats, str):
        date_formats = [date_formats]
    config['date_formats'] = list(date_formats)

    config['currency_format'] = config.get('currency_format', '${amount}')

    # Passed through to the aggregator untouched
    config['filters'] = config.get('filters')

    config['_config_dir'] = config_dir

    return config
