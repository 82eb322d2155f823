"""
Services Package

- terms_config_service: YAML vocabulary loading and the term dictionary
- config_validation: rule configuration validation
"""
