"""
最佳分段接口测试
"""

from fastapi import status

from biopeak.db.models import BestSegment


class TestBestSegment:
    """POST /segments/best-1km"""

    def test_best_segment_saved(self, client, db_session, user_id, user_headers,
                                make_activity, make_samples, sample_stream):
        """测试计算并保存最佳 1 公里分段"""
        make_activity("a1", distance=2000)
        make_samples(sample_stream["distance"], sample_stream["time"])

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": "a1", "user_id": user_id},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "Best 1km pace: 5.000 min/km"
        seg = data["bestSegment"]
        assert seg["best_1km_pace_min_km"] == 5.0
        assert seg["segment_start_distance_meters"] == 0
        assert seg["segment_end_distance_meters"] == 1000
        assert seg["segment_duration_seconds"] == 300
        assert db_session.query(BestSegment).count() == 1

    def test_recalculation_overwrites(self, client, db_session, user_id, user_headers,
                                      make_activity, make_samples, sample_stream):
        """测试重复计算只覆盖同一条记录"""
        make_activity("a1", distance=2000)
        make_samples(sample_stream["distance"], sample_stream["time"])
        payload = {"activity_id": "a1", "user_id": user_id}

        first = client.post("/segments/best-1km", json=payload, headers=user_headers)
        second = client.post("/segments/best-1km", json=payload, headers=user_headers)

        assert first.status_code == second.status_code == status.HTTP_200_OK
        assert db_session.query(BestSegment).filter_by(activity_id="a1").count() == 1

    def test_numeric_activity_id_is_accepted(self, client, user_id, user_headers,
                                             make_activity, make_samples, sample_stream):
        """测试数字形式的活动ID"""
        make_activity("12345", distance=2000)
        make_samples(sample_stream["distance"], sample_stream["time"], activity_id="12345")

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": 12345, "user_id": user_id},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["bestSegment"]["activity_id"] == "12345"

    def test_gps_spike_is_not_saved(self, client, db_session, user_id, user_headers,
                                    make_activity, make_samples):
        """测试单个 GPS 尖峰不会被当作最佳分段保存"""
        make_activity("a1", distance=3000)
        make_samples(
            [0, 9000] + [100 * k for k in range(1, 31)],
            [0, 3] + [30 * k for k in range(1, 31)],
        )

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": "a1", "user_id": user_id},
            headers=user_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        seg = response.json()["bestSegment"]
        assert seg["best_1km_pace_min_km"] == 5.0
        assert seg["segment_end_distance_meters"] - seg["segment_start_distance_meters"] == 1000
        assert db_session.query(BestSegment).one().best_1km_pace_min_km == 5.0

    def test_fractional_activity_id_is_400(self, client, user_id, user_headers):
        """测试带小数的活动ID返回400"""
        response = client.post(
            "/segments/best-1km",
            json={"activity_id": 12.5, "user_id": user_id},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "activity_id" in response.json()["error"]

    def test_short_activity_is_skipped(self, client, db_session, user_id, user_headers, make_activity):
        """测试不足 1 公里的活动被跳过"""
        make_activity("a1", distance=800)

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": "a1", "user_id": user_id},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["bestSegment"] is None
        assert data["message"] == "Activity skipped - less than 1km distance"
        assert db_session.query(BestSegment).count() == 0

    def test_samples_shorter_than_1km(self, client, user_id, user_headers, make_activity, make_samples):
        """测试采样总距离不足 1 公里"""
        make_activity("a1", distance=None)
        make_samples([0, 400, 900], [0, 120, 280])

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": "a1", "user_id": user_id},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["bestSegment"] is None
        assert response.json()["message"] == "No 1km segment found in this activity"

    def test_no_samples_is_404(self, client, user_id, user_headers, make_activity):
        """测试没有采样数据返回404"""
        make_activity("a1", distance=5000)

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": "a1", "user_id": user_id},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"success": False, "error": "No GPS data found for this activity"}

    def test_service_role_may_act_for_user(self, client, user_id, service_headers,
                                           make_activity, make_samples, sample_stream):
        """测试服务角色可以代用户调用"""
        make_activity("a1", distance=2000)
        make_samples(sample_stream["distance"], sample_stream["time"])

        response = client.post(
            "/segments/best-1km",
            json={"activity_id": "a1", "user_id": user_id},
            headers=service_headers,
        )
        assert response.status_code == status.HTTP_200_OK


class TestBestSegmentHistory:
    """GET /segments/best-1km"""

    def test_history(self, client, user_id, user_headers, make_activity, make_samples, sample_stream):
        """测试按活动日期倒序返回历史分段"""
        for activity_id, days_ago in (("a1", 3), ("a2", 1)):
            make_activity(activity_id, days_ago=days_ago, distance=2000)
            make_samples(sample_stream["distance"], sample_stream["time"], activity_id=activity_id)
            client.post(
                "/segments/best-1km",
                json={"activity_id": activity_id, "user_id": user_id},
                headers=user_headers,
            )

        response = client.get("/segments/best-1km", params={"user_id": user_id}, headers=user_headers)
        assert response.status_code == status.HTTP_200_OK
        segments = response.json()["segments"]
        assert [s["activity_id"] for s in segments] == ["a2", "a1"]

    def test_history_of_other_user_is_forbidden(self, client, user_id, other_user_headers):
        """测试查询他人历史返回403"""
        response = client.get("/segments/best-1km", params={"user_id": user_id}, headers=other_user_headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestBestSegmentFromFit:
    """POST /segments/best-1km/fit"""

    def test_fit_upload(self, client, user_headers, monkeypatch, sample_stream):
        """测试上传 FIT 文件即时计算"""
        monkeypatch.setattr(
            "biopeak.services.segment_service.extract_samples",
            lambda data: (sample_stream["distance"], sample_stream["time"]),
        )
        response = client.post(
            "/segments/best-1km/fit",
            files={"file": ("run.fit", b"fake-fit", "application/octet-stream")},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["bestSegment"]["best_1km_pace_min_km"] == 5.0

    def test_invalid_fit_is_400(self, client, user_headers):
        """测试空 FIT 文件返回400"""
        response = client.post(
            "/segments/best-1km/fit",
            files={"file": ("run.fit", b"", "application/octet-stream")},
            headers=user_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Empty FIT file"
