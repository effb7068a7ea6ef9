"""Root of the judgment-tally error hierarchy."""


class TallyError(Exception):
    """Base class for every error raised by judgment-tally.

    Catch this to handle "no tally could be produced" or "the judgment
    was not recorded" generically; the subclasses in domain.errors carry
    the subject, reason or missing prerequisites.
    """
