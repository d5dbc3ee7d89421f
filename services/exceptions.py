"""Exceptions raised by the term import services."""


class TermImportError(Exception):
    """Base class for term import failures."""


class InvalidTaxonomyError(TermImportError):
    """The requested taxonomy is missing or does not exist."""

    def __init__(self, taxonomy):
        self.taxonomy = taxonomy
        if taxonomy:
            message = (f"The taxonomy with the name {taxonomy} does not exist, "
                       "please use a taxonomy that does exist")
        else:
            message = "Please specify the taxonomy you would like to import your terms for"
        super().__init__(message)


class MissingInputError(TermImportError):
    """No data source was given, or it cannot be found."""

    def __init__(self, path=None):
        self.path = path
        if path:
            message = f"Missing file: {path}"
        else:
            message = "Please specify the filename of the csv you are trying to import"
        super().__init__(message)


class TermCreationError(TermImportError):
    """A single term could not be created. Recoverable."""


class TaxonomyExistsError(TermImportError):
    """A taxonomy with the same name already exists."""


class UnreadableInputError(TermImportError):
    """The data source exists but cannot be decoded or parsed."""

    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")
