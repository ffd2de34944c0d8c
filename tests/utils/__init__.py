"""
Test utilities package for Localizator tests.

### test_helpers.py
- `create_sample_project()`: Write a small PHP/Blade/Vue source tree
- `create_temp_config_file()`: Write a YAML configuration file
- `write_php_unit()`: Write an existing PHP translation document
- `write_json_store()`: Write an existing JSON translation document
"""
