"""
Map logic for the Good Samaritan map.

Projection, clustering, styling, interaction, live location and view control,
plus the API client and map session used by clients.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-18
"""
