"""
Oracle App - Real-Time Price Feed Engine

Client-side market-data core for oracle price feeds. Polls price sources on a
fixed cadence, keeps a bounded rolling history per instrument, derives
statistics, evaluates price alerts and runs a simulated trading portfolio
priced off the live feed.
"""

__version__ = "0.1.0"
__author__ = "Oracle App Team"
