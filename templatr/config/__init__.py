"""Settings and logging configuration"""
