"""Pytest configuration and shared fixtures."""

from hypothesis import settings

# Create a profile named "no_deadline" with deadline disabled.
#
# Reader properties run a whole event loop per example, which is too slow
# for the default per-example deadline on loaded CI machines.
settings.register_profile("no_deadline", deadline=None)
settings.load_profile("no_deadline")
