"""Test module for codec_text_view package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import codec_text_view

    # Assert
    assert codec_text_view is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import codec_text_view

    # Assert
    assert isinstance(codec_text_view.__version__, str)
    assert codec_text_view.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import codec_text_view

    # Assert
    assert codec_text_view.__author__ == "Codec Text View Team"


def test_package_all_exports_resolve() -> None:
    """Test that every name in __all__ is importable from the package."""
    # Arrange & Act
    import codec_text_view

    # Assert
    for name in codec_text_view.__all__:
        assert hasattr(codec_text_view, name), name


def test_factories_exposed_at_top_level() -> None:
    """Test that the level 1 factories are part of the public surface."""
    # Arrange & Act
    import codec_text_view

    # Assert
    for name in ("make_text_iterator", "make_text_end", "make_text_sentinel",
                 "make_text_writer", "iter_characters"):
        assert name in codec_text_view.__all__
        assert callable(getattr(codec_text_view, name))
