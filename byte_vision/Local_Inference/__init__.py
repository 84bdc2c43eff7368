"""
Local llama.cpp engines: model discovery and run control.
"""
