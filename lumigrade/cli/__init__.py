"""
Command line interface for Lumigrade
"""
