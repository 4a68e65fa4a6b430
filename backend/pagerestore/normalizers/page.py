def normalize_edit_form(page, restore=None):
    data = {
        "id": page.id,
        "title": page.title,
        "status": page.status,
        "fields": page.form_values(),
        "restore": None,
    }
    if restore:
        data["fields"] = restore["fields"]
        data["restore"] = {
            "identity_field": restore["identity_field"],
            "identity": restore["identity"],
            "ping": restore["ping"],
            "draft": restore["draft"],
        }
    return data


def normalize_restore_result(result):
    return {
        "state": result.state,
        "action": result.action,
        "changes": result.changes,
        "fields": result.fields,
    }
