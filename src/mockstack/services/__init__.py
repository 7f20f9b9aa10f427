"""Service containers and the scenarios that exercise them."""

from .fake_gcs import StorageReport, fake_gcs_spec, run_storage_scenario
from .mongo import (
    DocumentsReport,
    MongoSettings,
    mongo_spec,
    run_documents_scenario,
    seeder_spec,
)

__all__ = [
    "DocumentsReport",
    "MongoSettings",
    "StorageReport",
    "fake_gcs_spec",
    "mongo_spec",
    "run_documents_scenario",
    "run_storage_scenario",
    "seeder_spec",
]
