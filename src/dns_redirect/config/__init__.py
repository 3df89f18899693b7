"""
Redirect Service Configuration

Dataclass schema, validators and the YAML/JSON/environment loader.
"""
