from . import crud_interaction, crud_response, crud_template, crud_user  # noqa: F401
