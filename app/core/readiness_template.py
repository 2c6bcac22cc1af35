"""Default manager readiness checklist seeded for a new organization."""

READINESS_GROUPS: list[tuple[str, str]] = [
    ("paperwork", "Paperwork"),
    ("training", "Training"),
    ("skills", "Skills"),
    ("on_the_job", "On the Job"),
]

DEFAULT_READINESS_ITEMS: dict[str, list[tuple[str, str]]] = {
    "paperwork": [
        ("Background check cleared", "State background check completed and on file."),
        ("License or certification on file", "Current license or certificate copied into the personnel file."),
        ("Signed job description", "Manager has read and signed the position description."),
    ],
    "training": [
        ("Orientation completed", "Facility orientation covering policies and emergency plans."),
        ("Medication administration training", "Required medication training for the care setting."),
        ("First aid and CPR", "Current first aid and CPR certification."),
    ],
    "skills": [
        ("Resident care planning", "Can write and update a resident care plan."),
        ("Incident reporting", "Knows when and how to file an incident report."),
        ("Record keeping", "Keeps daily logs and records to the required standard."),
    ],
    "on_the_job": [
        ("Shadowed a full shift", "Worked a full shift alongside an experienced caregiver."),
        ("Led a shift with supervision", "Ran a shift with the owner available for questions."),
        ("Handled a drill or inspection", "Took part in a fire drill or licensing visit."),
    ],
}


def default_readiness_rows() -> list[dict]:
    """Rows (without org_id) for the default template, in display order."""
    rows = []
    sort_order = 0
    for group_key, group_label in READINESS_GROUPS:
        for title, description in DEFAULT_READINESS_ITEMS[group_key]:
            sort_order += 1
            rows.append(
                {
                    "group_key": group_key,
                    "group_label": group_label,
                    "title": title,
                    "description": description,
                    "status": None,
                    "is_custom": False,
                    "sort_order": sort_order,
                }
            )
    return rows
