"""Render data for README.md."""


def get_data(old_data):
    return {
        **old_data,
        "DESCRIPTION": "This template should help get you started developing with Vue 3 in Vite.",
    }
