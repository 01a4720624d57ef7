"""Combine all Dagster definitions."""

from dagster import Definitions
from src.dagster.reminders.definitions import defs as reminders_defs
from src.observability.sentry import init_sentry
from src.utils.logging import configure_logging

configure_logging()
init_sentry()

defs = Definitions.merge(reminders_defs)
