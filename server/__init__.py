"""
Server modules for the Good Samaritan map.

This package contains FastAPI router modules for the pin and comment API,
map endpoints, response models and SSE broadcasting.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""
