"""
Price alert thresholds and the bounded alert log.
"""
