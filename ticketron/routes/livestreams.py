from flask import Blueprint, request

from ..errors import ok
from ..gateways import LivestreamGateway
from ..schemas import LivestreamStartIn, parse_body


def init_livestreams(livestreams: LivestreamGateway) -> Blueprint:
    bp = Blueprint("livestreams", __name__, url_prefix="/livestreams")

    @bp.post("/start")
    def start_livestream():
        payload = parse_body(LivestreamStartIn, request.get_json(silent=True) or {})
        return ok(livestreams.create(payload.playback_policy), 201)

    @bp.get("")
    def list_livestreams():
        return ok(livestreams.list())

    @bp.get("/<stream_id>")
    def get_livestream(stream_id: str):
        return ok(livestreams.retrieve(stream_id))

    @bp.post("/<stream_id>/end")
    def end_livestream(stream_id: str):
        livestreams.disable(stream_id)
        return "", 204

    return bp
