"""Reflex configuration for the user table demo app."""

import reflex as rx

config = rx.Config(
    app_name="user_table_demo",
    plugins=[rx.plugins.SitemapPlugin()],
)
