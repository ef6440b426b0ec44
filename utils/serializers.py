"""JSON shapes returned by the API. Column names are kept as stored."""


def _iso(value):
    return value.isoformat() if value else None


def user_out(u) -> dict:
    # never includes the password hash
    return {
        "id": u.id,
        "username": u.username,
        "email": u.email,
        "role": u.role,
        "created": _iso(u.created),
    }


def game_out(g) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "app_id": g.app_id,
        "platform": g.platform,
        "price": g.price,
        "category": g.category,
        "description": g.description,
        "library_image": g.library_image,
        "is_special": g.is_special,
        "special_price": g.special_price,
        "created": _iso(g.created),
    }


def account_public_out(a) -> dict:
    # listing view: credentials withheld
    return {"id": a.id, "username": a.username, "email": a.email, "status": a.status}


def account_out(a) -> dict:
    return {
        "id": a.id,
        "game_id": a.game_id,
        "username": a.username,
        "password": a.password,
        "email": a.email,
        "guard_code": a.guard_code,
        "status": a.status,
        "purchased_by": a.purchased_by,
        "purchased_at": _iso(a.purchased_at),
        "created": _iso(a.created),
    }


def key_out(k) -> dict:
    return {
        "id": k.id,
        "key_value": k.key_value,
        "game_id": k.game_id,
        "key_type": k.key_type,
        "status": k.status,
        "used_by": k.used_by,
        "used_date": _iso(k.used_date),
        "created": _iso(k.created),
    }


def suggestion_out(s) -> dict:
    return {
        "id": s.id,
        "game_name": s.game_name,
        "username": s.username,
        "description": s.description,
        "created": _iso(s.created),
    }


def purchase_out(p) -> dict:
    return {
        "id": p.id,
        "user_id": p.user_id,
        "game_id": p.game_id,
        "account_id": p.account_id,
        "key_id": p.key_id,
        "purchase_type": p.purchase_type,
        "price": p.price,
        "created": _iso(p.created),
    }


def audit_out(r) -> dict:
    return {
        "id": r.id,
        "created_at": _iso(r.timestamp),
        "user_id": r.user_id,
        "action": r.action,
        "entity": r.entity,
        "entity_id": r.entity_id,
        "ip": r.ip,
        "user_agent": r.user_agent,
        "metadata": r.metadata_json,
    }
