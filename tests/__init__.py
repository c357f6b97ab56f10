"""
forgekit test suite
===================

Test Modules
------------
- test_traverse.py: Tests for pre-/post-order directory traversal
- test_conventions.py: Tests for the file-name convention table
- test_manifest.py: Tests for manifest merging and dependency sorting
- test_copier.py: Tests for template copy and project self-copy
- test_renderer.py: Tests for the rendering pass and stray cleanup
- test_models.py: Tests for Pydantic configuration models
- test_generator.py: Tests for the end-to-end pipeline
- test_cli.py: Tests for the command-line interface

Running Tests
-------------
    # Run all tests
    pytest

    # Run specific module
    pytest tests/test_generator.py

    # Run specific test class
    pytest tests/test_manifest.py::TestDeepMerge
"""
