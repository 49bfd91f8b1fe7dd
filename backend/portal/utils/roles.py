from .dependencies import (
    get_admin_principal,
    get_candidate_or_admin_principal,
    get_candidate_principal,
)

candidate_only = get_candidate_principal
admin_only = get_admin_principal
candidate_or_admin = get_candidate_or_admin_principal
