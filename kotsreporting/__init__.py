"""kotsreporting — operational telemetry reporting for the admin console.

Collects facts about a running application instance and delivers them either
to the vendor endpoint (online installs) or into a bounded, cluster-local
report log (air-gapped installs).
"""

__version__ = "0.1.0"
