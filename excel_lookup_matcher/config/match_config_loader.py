"""
Match configuration loader for Excel lookup matching.

This module handles loading and validation of YAML/JSON match files,
with friendly error reporting and structure validation.

Example match file:

    description: Enrich orders with customer details
    master:
      file: orders.xlsx
      sheet: Orders
      key: Customer_ID
    lookup:
      file: customers.xlsx
      key: ID
    append_columns: [Name, Region]
    fuzzy: true
    output:
      file: orders_enriched.xlsx
"""

import json
import yaml
import logging

from pathlib import Path
from collections import OrderedDict


logger = logging.getLogger(__name__)

KNOWN_SECTIONS = ['description', 'master', 'lookup', 'append_columns', 'fuzzy', 'output']
TABLE_FIELDS = ['file', 'sheet', 'key']
OUTPUT_FIELDS = ['file', 'sheet_name']


class ConfigValidationError(Exception):
    """Raised when a match file has invalid structure or content."""
    pass


class OrderedYAMLLoader(yaml.SafeLoader):
    """Custom YAML loader that preserves section order."""
    pass


def construct_mapping(loader: yaml.SafeLoader, node):
    """Preserve order of sections in YAML."""
    loader.flatten_mapping(node)
    return OrderedDict(loader.construct_pairs(node))


OrderedYAMLLoader.add_constructor(yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping)


class MatchConfigLoader:
    """
    Loads and validates match configuration files.

    Supports both YAML and JSON formats. Keys and append columns may be left
    out of the file and supplied on the command line or interactively.
    """

    def __init__(self):
        """Initialize the match config loader."""
        self.config_data = None
        self.config_path = None

    def load_file(self, config_path) -> dict:
        """
        Load a match file from disk with validation.

        Args:
            config_path: Path to the match file (.yaml, .yml, or .json)

        Returns:
            Loaded and validated match data

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigValidationError: If the format is invalid or has errors
        """
        if not config_path:
            raise ConfigValidationError("Match config path cannot be empty")

        self.config_path = Path(config_path)

        if not self.config_path.exists():
            raise FileNotFoundError(f"Match config file not found: {self.config_path}")

        logger.info(f"Loading match config from: {self.config_path}")

        suffix = self.config_path.suffix.lower()
        if suffix in ['.yaml', '.yml']:
            format_type = 'yaml'
        elif suffix == '.json':
            format_type = 'json'
        else:
            raise ConfigValidationError(
                f"Unsupported file format: {self.config_path.suffix}. "
                f"Supported formats: .yaml, .yml, .json"
            )

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            raise ConfigValidationError(f"Error reading match config file: {e}")

        return self.load_string(text, format_type, source=str(self.config_path))

    def load_string(self, config_string: str, format_type: str = 'yaml', source: str = '<string>') -> dict:
        """
        Load a match configuration from a string.

        Args:
            config_string: Match configuration content
            format_type: Format type ('yaml' or 'json')
            source: Name used in error messages

        Returns:
            Loaded and validated match data
        """
        try:
            if format_type.lower() == 'yaml':
                data = yaml.load(config_string, Loader=OrderedYAMLLoader)
            elif format_type.lower() == 'json':
                data = json.loads(config_string, object_pairs_hook=OrderedDict)
            else:
                raise ConfigValidationError(f"Unsupported format type: {format_type}")

        except yaml.YAMLError as e:
            raise ConfigValidationError(f"YAML syntax error in {source}: {e}")
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"JSON syntax error in {source}: {e}")

        if not data:
            raise ConfigValidationError("Match config is empty or contains no data")

        if not isinstance(data, dict):
            raise ConfigValidationError("Match config must be a mapping of sections")

        self.config_data = data

        validation_result = self.validate_structure()
        if not validation_result['valid']:
            error_msg = "Match config validation failed:\n"
            for error in validation_result['errors']:
                error_msg += f"  • {error}\n"
            raise ConfigValidationError(error_msg.strip())

        # Log warnings (non-fatal issues)
        for warning in validation_result['warnings']:
            logger.warning(f"⚠️  {warning}")

        logger.info(f"Loaded match config: {self.summary()}")
        return self.config_data

    def validate_structure(self) -> dict:
        """
        Validate the overall structure of the match configuration.

        Returns:
            Dictionary with validation results: {'valid': bool, 'errors': list, 'warnings': list}
        """
        errors = []
        warnings = []

        if not self.config_data:
            errors.append("No match config loaded")
            return {'valid': False, 'errors': errors, 'warnings': warnings}

        for section in self.config_data:
            if section not in KNOWN_SECTIONS:
                warnings.append(f"Unknown section '{section}' ignored. Known sections: {KNOWN_SECTIONS}")

        if 'master' not in self.config_data:
            errors.append("Missing required 'master' section")
            errors.append("💡 Example:")
            errors.append("master:")
            errors.append("  file: orders.xlsx")
            errors.append("  key: Customer_ID")
            return {'valid': False, 'errors': errors, 'warnings': warnings}

        master_validation = self._validate_table_section('master', required_file=True)
        errors.extend(master_validation['errors'])
        warnings.extend(master_validation['warnings'])

        if 'lookup' in self.config_data:
            lookup_validation = self._validate_table_section('lookup', required_file=False)
            errors.extend(lookup_validation['errors'])
            warnings.extend(lookup_validation['warnings'])
        else:
            warnings.append("No 'lookup' section: lookup key must be given on the command line")

        columns = self.config_data.get('append_columns')
        if columns is None:
            warnings.append("No 'append_columns': columns must be given on the command line")
        elif not isinstance(columns, list) or not all(isinstance(col, str) and col for col in columns):
            errors.append("'append_columns' must be a list of column names")

        if 'fuzzy' in self.config_data and not isinstance(self.config_data['fuzzy'], bool):
            errors.append(f"'fuzzy' must be true or false, got: {self.config_data['fuzzy']!r}")

        if 'output' in self.config_data:
            output_validation = self._validate_output_section()
            errors.extend(output_validation['errors'])
            warnings.extend(output_validation['warnings'])

        return {'valid': len(errors) == 0, 'errors': errors, 'warnings': warnings}

    def _validate_table_section(self, section_name: str, required_file: bool) -> dict:
        """Validate a 'master' or 'lookup' section."""
        errors = []
        warnings = []

        section = self.config_data.get(section_name)

        if not isinstance(section, dict):
            errors.append(f"'{section_name}' section must be a mapping with file, sheet and key")
            return {'errors': errors, 'warnings': warnings}

        for field_name in section:
            if field_name not in TABLE_FIELDS:
                warnings.append(f"Unknown field '{section_name}.{field_name}' ignored")

        if required_file and not section.get('file'):
            errors.append(f"Missing required field '{section_name}.file'")

        for field_name in TABLE_FIELDS:
            value = section.get(field_name)
            if value is not None and not isinstance(value, str):
                # Sheet names and keys that look numeric are a common YAML surprise
                errors.append(
                    f"'{section_name}.{field_name}' must be text, got {type(value).__name__}: {value!r}. "
                    f"Quote it in YAML."
                )

        if not section.get('key'):
            warnings.append(f"No '{section_name}.key': key column must be given on the command line")

        return {'errors': errors, 'warnings': warnings}

    def _validate_output_section(self) -> dict:
        """Validate the optional 'output' section."""
        errors = []
        warnings = []

        output = self.config_data.get('output')
        if not isinstance(output, dict):
            errors.append("'output' section must be a mapping with file and sheet_name")
            return {'errors': errors, 'warnings': warnings}

        for field_name in output:
            if field_name not in OUTPUT_FIELDS:
                warnings.append(f"Unknown field 'output.{field_name}' ignored")

        for field_name in OUTPUT_FIELDS:
            value = output.get(field_name)
            if value is not None and not isinstance(value, str):
                errors.append(f"'output.{field_name}' must be text, got: {value!r}")

        return {'errors': errors, 'warnings': warnings}

    def get_match_settings(self) -> dict:
        """
        Flatten the loaded configuration into MatchConfig keyword arguments.

        Relative file paths are resolved against the config file's folder.
        Fields not present in the file are None; a missing lookup file means
        the master file, applied by the caller after command line overrides.
        """
        if not self.config_data:
            raise ConfigValidationError("No match config loaded")

        master = self.config_data.get('master') or {}
        lookup = self.config_data.get('lookup') or {}
        output = self.config_data.get('output') or {}

        master_file = self._resolve_path(master.get('file'))
        lookup_file = self._resolve_path(lookup.get('file'))
        columns = self.config_data.get('append_columns')

        return {
            'master_file': master_file,
            'master_sheet': master.get('sheet'),
            'master_key': master.get('key'),
            'lookup_file': lookup_file,
            'lookup_sheet': lookup.get('sheet'),
            'lookup_key': lookup.get('key'),
            'append_columns': list(columns) if columns is not None else None,
            'fuzzy': self.config_data.get('fuzzy'),
            'output_file': self._resolve_path(output.get('file')),
            'output_sheet': output.get('sheet_name'),
        }

    def summary(self) -> str:
        """Short description of the loaded configuration."""
        if not self.config_data:
            return "No match config loaded"

        master = self.config_data.get('master') or {}
        lookup = self.config_data.get('lookup') or {}
        columns = self.config_data.get('append_columns') or []
        mode = 'fuzzy' if self.config_data.get('fuzzy', True) else 'exact'

        return (f"{master.get('file')} [{master.get('key')}] ← "
                f"{lookup.get('file') or master.get('file')} [{lookup.get('key')}], "
                f"{len(columns)} column(s), {mode} keys")

    def _resolve_path(self, file_value):
        """Resolve a file path relative to the config file location."""
        if not file_value:
            return None

        path = Path(file_value).expanduser()
        if not path.is_absolute() and self.config_path is not None:
            path = self.config_path.parent / path

        return str(path)


# End of file #
