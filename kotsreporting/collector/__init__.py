"""Reporting info collection.

Submodules
----------
info       -- ReportingInfoCollector: assembles a ReportingInfo snapshot.
kotskinds  -- Reads Installation/HelmChart facts from a version archive.
preflight  -- Derives pass/warn/fail from stored preflight results.
"""

from kotsreporting.collector.info import ReportingInfoCollector

__all__ = ["ReportingInfoCollector"]
