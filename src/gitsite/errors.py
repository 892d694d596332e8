"""Exceptions raised while turning a source tree into a site."""


class StructuralError(ValueError):
    """The source tree is malformed and the build cannot continue.

    Retrying cannot help: the source directory has to be fixed first.
    """


class DuplicateChapterError(StructuralError):
    """Two sibling chapters resolve to the same URI."""

    def __init__(self, uri: str, parent_dir: str) -> None:
        self.uri = uri
        self.parent_dir = parent_dir
        super().__init__(f'Duplicate chapter names "{uri}" under "{parent_dir}".')


class MissingMetadataError(StructuralError):
    """The designated markdown file of a content directory does not exist."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f'Markdown file "{path}" not found.')


class MissingTitleError(StructuralError):
    """The first non-blank line of a markdown file is not a "# title" heading."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(
            f'Markdown file "{path}" must have a title in first line defined as "# title".'
        )


class InvalidBlogNameError(StructuralError):
    """A blog folder name does not start with a valid ISO date."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Invalid blog folder name: {name}")


class EmptyBookError(StructuralError):
    """A book directory contains no chapters."""

    def __init__(self, book: str) -> None:
        self.book = book
        super().__init__(f"Empty book {book}")


class IndexFormatError(ValueError):
    """An exported search index is incomplete, corrupt, or of another version."""
