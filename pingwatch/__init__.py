"""
PingWatch: latency baselines, anomaly classification and next-value forecasts
for periodically probed endpoints.
"""

__version__ = "0.1.0"
