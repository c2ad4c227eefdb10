from flask import jsonify, request


def form_errors(form) -> dict:
    return {name: list(errors) for name, errors in form.errors.items()}


def uploaded_files(field="files"):
    return [f for f in request.files.getlist(field) if f and f.filename]


def respond(result, status=200):
    """JSON body for a service Result."""
    return jsonify(result.to_dict()), status
