"""
鉴权与通用错误处理测试
"""

from datetime import timedelta

import pytest
from fastapi import status

from biopeak.auth import Caller, create_access_token, decode_access_token, ensure_same_user
from biopeak.errors import Forbidden, Unauthorized


def test_token_round_trip(user_id):
    claims = decode_access_token(create_access_token(user_id))
    assert claims["sub"] == user_id
    assert claims["role"] == "authenticated"


def test_expired_token_is_rejected(user_id):
    token = create_access_token(user_id, expires_delta=timedelta(seconds=-10))
    with pytest.raises(Unauthorized):
        decode_access_token(token)


def test_token_with_wrong_secret_is_rejected(user_id):
    token = create_access_token(user_id, secret="another-secret")
    with pytest.raises(Unauthorized):
        decode_access_token(token)


def test_ensure_same_user():
    ensure_same_user(Caller("u1"), "u1")
    ensure_same_user(Caller(None, role="service_role"), "anyone")
    with pytest.raises(Forbidden):
        ensure_same_user(Caller("u1"), "u2")


class TestHttpErrors:
    """所有错误都以 {"success": false, "error": ...} 返回"""

    def test_missing_token_is_401(self, client, user_id):
        """测试缺少令牌返回401"""
        response = client.post("/overtraining/risk", json={"user_id": user_id})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"success": False, "error": "Not authenticated"}

    def test_garbage_token_is_401(self, client, user_id):
        """测试无效令牌返回401"""
        response = client.post(
            "/overtraining/risk",
            json={"user_id": user_id},
            headers={"Authorization": "Bearer not-a-jwt"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["success"] is False

    def test_other_user_is_403(self, client, user_id, other_user_headers):
        """测试令牌与 user_id 不一致返回403"""
        response = client.post("/gas-model", json={"user_id": user_id}, headers=other_user_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "Forbidden"

    def test_missing_param_is_400(self, client, user_headers):
        """测试缺少必填参数返回400"""
        response = client.post("/segments/best-1km", json={"user_id": "x"}, headers=user_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert "activity_id" in body["error"]

    def test_unknown_route_is_404(self, client):
        """测试未知路由返回404"""
        response = client.get("/nope")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["success"] is False

    def test_cors_preflight(self, client):
        """测试 CORS 预检请求"""
        response = client.options(
            "/overtraining/risk",
            headers={
                "Origin": "https://app.example.com",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.headers["access-control-allow-origin"] == "*"
