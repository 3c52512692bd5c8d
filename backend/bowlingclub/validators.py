"""Request payload validation.

Every helper either returns cleaned values or raises ``ValidationError`` with
the list of field messages, so bad input never reaches a service.
"""

from datetime import date, datetime, timezone

from email_validator import validate_email, EmailNotValidError
from flask import current_app, request

from bowlingclub.errors import ValidationError
from bowlingclub.models import GAME_TYPES

MIN_SCORE = 0
MAX_SCORE = 300
SORT_OPTIONS = ('date_desc', 'date_asc', 'score_desc', 'score_asc')
# Keeps the row offset inside a 64-bit SQL OFFSET
MAX_PAGE = 1_000_000


def get_json_body(allowed=None):
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError('요청 본문은 JSON 객체여야 합니다.')
    if allowed is not None:
        unknown = sorted(set(data) - set(allowed))
        if unknown:
            raise ValidationError(errors=[f'허용되지 않은 속성입니다: {k}' for k in unknown])
    return data


def _is_int(value):
    # bool is an int subclass; reject it explicitly
    return isinstance(value, int) and not isinstance(value, bool)


def clean_email(value, errors):
    if not isinstance(value, str) or not value.strip():
        errors.append('올바른 이메일 형식이 아닙니다.')
        return None
    try:
        return validate_email(value.strip(), check_deliverability=False).normalized.lower()
    except EmailNotValidError:
        errors.append('올바른 이메일 형식이 아닙니다.')
        return None


def clean_optional_string(data, key, label, errors, max_length=512):
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append(f'{label}은(는) 문자열이어야 합니다.')
        return None
    value = value.strip()
    if len(value) > max_length:
        errors.append(f'{label}이(가) 너무 깁니다.')
        return None
    return value or None


def clean_int(value, label, errors, minimum=None, maximum=None, required=True):
    if value is None:
        if required:
            errors.append(f'{label}은(는) 필수입니다.')
        return None
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            errors.append(f'{label}은(는) 정수여야 합니다.')
            return None
    if not _is_int(value):
        errors.append(f'{label}은(는) 정수여야 합니다.')
        return None
    if minimum is not None and value < minimum:
        errors.append(f'{label}은(는) {minimum} 이상이어야 합니다.')
        return None
    if maximum is not None and value > maximum:
        errors.append(f'{label}은(는) {maximum} 이하여야 합니다.')
        return None
    return value


def parse_datetime(value):
    """Parse an ISO date or datetime into a naive UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f'not a date: {value!r}')
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def clean_datetime(value, label, errors, required=True):
    if value in (None, ''):
        if required:
            errors.append(f'{label}은(는) 필수입니다.')
        return None
    try:
        return parse_datetime(value)
    except ValueError:
        errors.append(f'{label}은(는) 올바른 날짜 형식이어야 합니다.')
        return None


def clean_game_type(value, errors):
    if value is None:
        return None
    if value not in GAME_TYPES:
        errors.append(f"게임 종류는 {', '.join(GAME_TYPES)} 중 하나여야 합니다.")
        return None
    return value


def _raise_if(errors):
    if errors:
        raise ValidationError(errors=errors)


def validate_register(data):
    errors = []
    email = clean_email(data.get('email'), errors)
    password = data.get('password')
    if not isinstance(password, str):
        errors.append('비밀번호는 문자열이어야 합니다.')
    elif len(password) < 6:
        errors.append('비밀번호는 최소 6자리 이상이어야 합니다.')
    name = data.get('name')
    if not isinstance(name, str):
        errors.append('이름은 문자열이어야 합니다.')
    elif len(name.strip()) < 2:
        errors.append('이름은 최소 2자리 이상이어야 합니다.')
    phone_number = clean_optional_string(data, 'phoneNumber', '전화번호', errors, max_length=32)
    profile_image_url = clean_optional_string(data, 'profileImageUrl', '프로필 이미지 URL', errors)
    _raise_if(errors)
    return {
        'email': email,
        'password': password,
        'name': name.strip(),
        'phone_number': phone_number,
        'profile_image_url': profile_image_url,
    }


def validate_login(data):
    errors = []
    email = clean_email(data.get('email'), errors)
    password = data.get('password')
    if not isinstance(password, str):
        errors.append('비밀번호는 문자열이어야 합니다.')
    _raise_if(errors)
    return {'email': email, 'password': password}


def validate_create_game(data):
    errors = []
    cleaned = {
        'club_id': clean_int(data.get('clubId'), '클럽 ID', errors, minimum=1),
        'bowling_center_id': clean_int(data.get('bowlingCenterId'), '볼링장 ID', errors, minimum=1),
        'game_date': clean_datetime(data.get('gameDate'), '게임 날짜', errors),
        'game_type': clean_game_type(data.get('gameType'), errors),
    }
    _raise_if(errors)
    return cleaned


def validate_score(value, errors):
    return clean_int(value, '점수', errors, minimum=MIN_SCORE, maximum=MAX_SCORE)


def validate_create_score(data):
    errors = []
    cleaned = {
        'game_id': clean_int(data.get('gameId'), '게임 ID', errors, minimum=1),
        'score': validate_score(data.get('score'), errors),
        'game_order': clean_int(data.get('gameOrder'), '게임 순서', errors, minimum=1),
    }
    _raise_if(errors)
    return cleaned


def validate_update_score(data):
    errors = []
    score = validate_score(data.get('score'), errors)
    _raise_if(errors)
    return score


def validate_quick_game(data):
    errors = []
    score = clean_int(data.get('score'), '점수', [], minimum=MIN_SCORE, maximum=MAX_SCORE)
    if score is None:
        errors.append('올바른 점수를 입력해주세요 (0-300)')
    cleaned = {
        'score': score,
        'club_id': clean_int(data.get('clubId'), '클럽 ID', errors, minimum=1, required=False),
        'bowling_center_id': clean_int(data.get('bowlingCenterId'), '볼링장 ID', errors, minimum=1, required=False),
        'game_type': clean_game_type(data.get('gameType'), errors),
    }
    _raise_if(errors)
    return cleaned


def validate_create_club(data):
    errors = []
    name = data.get('name')
    if not isinstance(name, str) or len(name.strip()) < 2:
        errors.append('클럽 이름은 최소 2자리 이상이어야 합니다.')
    description = clean_optional_string(data, 'description', '클럽 설명', errors, max_length=2000)
    center_id = clean_int(data.get('bowlingCenterId'), '볼링장 ID', errors, minimum=1, required=False)
    _raise_if(errors)
    return {'name': name.strip(), 'description': description, 'bowling_center_id': center_id}


def validate_create_center(data):
    errors = []
    name = data.get('name')
    if not isinstance(name, str) or not name.strip():
        errors.append('볼링장 이름은 필수입니다.')
    address = data.get('address')
    if not isinstance(address, str) or not address.strip():
        errors.append('주소는 필수입니다.')
    lane_count = clean_int(data.get('laneCount'), '레인 수', errors, minimum=1, required=False)
    parking = data.get('parkingAvailable', False)
    if not isinstance(parking, bool):
        errors.append('주차 가능 여부는 true/false 여야 합니다.')
    _raise_if(errors)
    return {
        'name': name.strip(),
        'address': address.strip(),
        'lane_count': lane_count,
        'parking_available': parking,
    }


def pagination_args(args):
    errors = []
    cfg = current_app.config
    page = clean_int(args.get('page', 1), '페이지', errors, minimum=1, maximum=MAX_PAGE)
    limit = clean_int(
        args.get('limit', cfg.get('DEFAULT_PAGE_LIMIT', 20)),
        '페이지당 항목 수',
        errors,
        minimum=1,
        maximum=int(cfg.get('MAX_PAGE_LIMIT', 100)),
    )
    _raise_if(errors)
    return page, limit


def score_list_args(args):
    """Sort and filter options for the caller's score list."""
    errors = []
    sort = args.get('sort', 'date_desc')
    if sort not in SORT_OPTIONS:
        errors.append(f"정렬 옵션은 {', '.join(SORT_OPTIONS)} 중 하나여야 합니다.")
    filters = {
        'club_name': (args.get('clubName') or '').strip() or None,
        'bowling_center_name': (args.get('bowlingCenterName') or '').strip() or None,
        'start_date': clean_datetime(args.get('startDate'), '시작 날짜', errors, required=False),
        'end_date': clean_datetime(args.get('endDate'), '종료 날짜', errors, required=False),
        'min_score': clean_int(args.get('minScore'), '최소 점수', errors, MIN_SCORE, MAX_SCORE, required=False),
        'max_score': clean_int(args.get('maxScore'), '최대 점수', errors, MIN_SCORE, MAX_SCORE, required=False),
    }
    _raise_if(errors)
    return sort, filters
