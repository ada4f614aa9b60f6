#!/usr/bin/env python3
"""Simple script to verify config.example.yaml structure without importing dupfinder."""

import yaml
from pathlib import Path

SECTIONS = {
    'detection': {'threshold': int, 'stdin_sentinel': str, 'queue_size': int, 'encoding': str},
    'keys': {'long_line_threshold': int, 'hash_algorithm': str, 'digest_bits': (int, type(None))},
    'output': {'format': str, 'sort': str},
    'logging': {'level': str, 'format': str},
}

ALLOWED_VALUES = {
    ('output', 'format'): ['text', 'json'],
    ('output', 'sort'): ['none', 'count', 'key'],
    ('logging', 'level'): ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
    ('logging', 'format'): ['json', 'key-value'],
    ('keys', 'hash_algorithm'): ['sha256', 'sha512', 'sha3_256', 'sha3_512', 'blake2b', 'blake2s'],
}


def verify_config_structure():
    """Verify config.example.yaml has the expected structure."""
    config_file = Path("config.example.yaml")

    if not config_file.exists():
        print("✗ config.example.yaml not found")
        return False

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print(f"✗ Failed to parse config.example.yaml: {e}")
        return False

    if not isinstance(config, dict):
        print("✗ config.example.yaml must contain a mapping at the top level")
        return False

    errors = []

    for section in config:
        if section not in SECTIONS:
            errors.append(f"Unknown section: {section}")

    for section, fields in SECTIONS.items():
        if section not in config:
            errors.append(f"Missing section: {section}")
            continue
        if not isinstance(config[section], dict):
            errors.append(f"'{section}' must be a dictionary")
            continue

        for key, value in config[section].items():
            if key not in fields:
                errors.append(f"Unknown setting: {section}.{key}")
            elif not isinstance(value, fields[key]) or isinstance(value, bool):
                errors.append(f"'{section}.{key}' has the wrong type: {value!r}")
            elif (section, key) in ALLOWED_VALUES and value not in ALLOWED_VALUES[(section, key)]:
                errors.append(f"'{section}.{key}' has invalid value: {value}")

    detection = config.get('detection') or {}
    if isinstance(detection.get('threshold'), int) and detection['threshold'] < 0:
        errors.append("'detection.threshold' must be >= 0")

    if errors:
        print("✗ config.example.yaml validation failed:")
        for error in errors:
            print(f"  - {error}")
        return False
    else:
        print("✓ config.example.yaml structure is valid")
        print(f"  - Threshold: {detection.get('threshold', 'not set')}")
        keys = config.get('keys') or {}
        print(f"  - Long lines: >= {keys.get('long_line_threshold', 'not set')} bytes, "
              f"hashed with {keys.get('hash_algorithm', 'not set')}")
        output = config.get('output') or {}
        print(f"  - Report: {output.get('format', 'not set')}, sorted by {output.get('sort', 'not set')}")
        return True


if __name__ == "__main__":
    import sys
    success = verify_config_structure()
    sys.exit(0 if success else 1)
