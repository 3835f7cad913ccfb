"""
HTTP tests for the student portal.
"""
from services.course_reader import CourseReader


class TestStudentPages:
    """Test rendered student pages."""

    def test_catalog_lists_published_only(self, student_client, published_course, draft_course):
        response = student_client.get("/student/courses")

        assert response.status_code == 200
        assert "Python Basics" in response.text
        assert "Work in progress" not in response.text

    def test_course_page(self, student_client, published_course):
        response = student_client.get(f"/student/course/{published_course}")

        assert response.status_code == 200
        assert "Getting started" in response.text

    def test_draft_course_page_not_found(self, student_client, draft_course):
        assert student_client.get(f"/student/course/{draft_course}").status_code == 404

    def test_dashboard_shows_enrollments(self, student_client, published_course):
        student_client.post(f"/student/course/{published_course}/enroll")
        response = student_client.get("/student/dashboard")

        assert response.status_code == 200
        assert "Python Basics" in response.text


class TestEnrollmentEndpoints:
    """Test enroll/unenroll JSON endpoints."""

    def test_enroll_and_status(self, student_client, published_course):
        response = student_client.post(f"/student/course/{published_course}/enroll")
        assert response.status_code == 200
        assert response.json()["enrolled"] is True

        status = student_client.get(f"/student/course/{published_course}/enrollment").json()
        assert status["enrolled"] is True

    def test_enroll_twice(self, student_client, published_course):
        student_client.post(f"/student/course/{published_course}/enroll")
        response = student_client.post(f"/student/course/{published_course}/enroll")

        assert response.status_code == 400
        assert response.json()["message"] == "You are already enrolled in this course"

    def test_enroll_draft(self, student_client, draft_course):
        response = student_client.post(f"/student/course/{draft_course}/enroll")
        assert response.status_code == 400

    def test_unenroll(self, student_client, published_course):
        assert student_client.delete(f"/student/course/{published_course}/unenroll").status_code == 400

        student_client.post(f"/student/course/{published_course}/enroll")
        response = student_client.delete(f"/student/course/{published_course}/unenroll")
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestProgressEndpoints:
    """Test lesson completion endpoints."""

    def test_complete_and_reset(self, db, student_client, published_course):
        lesson_id = CourseReader(db).get_course(published_course).lessons[0].id
        student_client.post(f"/student/course/{published_course}/enroll")

        body = student_client.post(f"/student/course/{published_course}/lessons/{lesson_id}/complete").json()
        assert body["completed_lessons"] == 1
        assert body["progress_percent"] == 50.0

        body = student_client.delete(f"/student/course/{published_course}/lessons/{lesson_id}/complete").json()
        assert body["completed_lessons"] == 0

    def test_complete_without_enrollment(self, db, student_client, published_course):
        lesson_id = CourseReader(db).get_course(published_course).lessons[0].id
        response = student_client.post(f"/student/course/{published_course}/lessons/{lesson_id}/complete")

        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_instructor_cannot_enroll(self, instructor_client, published_course):
        response = instructor_client.post(
            f"/student/course/{published_course}/enroll",
            headers={"Accept": "application/json"},
        )
        assert response.status_code == 403
