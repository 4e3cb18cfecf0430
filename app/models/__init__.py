from app.models.db import JournalEntryRecord, SkinAnalysisRecord, TreatmentTrackingRecord, User

__all__ = [
    "User",
    "SkinAnalysisRecord",
    "JournalEntryRecord",
    "TreatmentTrackingRecord",
]
