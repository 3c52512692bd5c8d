from flask import jsonify


def envelope(data=None, message=None, status=200):
    body = {'success': True, 'message': message}
    if data is not None:
        body['data'] = data
    return jsonify(body), status
