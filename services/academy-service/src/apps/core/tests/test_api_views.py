# services/academy-service/src/apps/core/tests/test_api_views.py
"""
Tests for API Views

Tests REST API endpoints including:
- Authentication endpoints
- User, course and enrollment endpoints
- Admin endpoints
- Response envelope and error codes
"""

import pytest
from decimal import Decimal

from rest_framework import status
from rest_framework.test import APIClient

from apps.core.models import Course, Enrollment, User
from apps.core.services import AuthService, EnrollmentService


pytestmark = pytest.mark.django_db


REGISTRATION = {
    'first_name': 'Amelia',
    'last_name': 'Earhart',
    'email': 'Amelia@Academy.test',
    'password': 'Pilot123',
    'phone': '+1 (555) 010-0199',
    'user_type': 'student',
}


@pytest.fixture
def enrollment(student_user, course):
    return EnrollmentService.create_enrollment(
        student_user,
        course.id,
        Enrollment.PaymentMode.CREDIT_CARD,
        Enrollment.InstallmentPlan.SIX_MONTHS,
    )


def bearer(api_client, token):
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')
    return api_client


class TestAuthEndpoints:
    """Tests for authentication API endpoints."""

    def test_register_then_me_round_trip(self, api_client):
        response = api_client.post('/api/v1/auth/register/', REGISTRATION, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body['status'] == 'success'
        assert 'password' not in body['data']['user']
        token = body['data']['token']

        response = bearer(api_client, token).get('/api/v1/auth/me/')

        assert response.status_code == status.HTTP_200_OK
        user = response.json()['data']['user']
        assert user['email'] == 'amelia@academy.test'
        assert user['first_name'] == 'Amelia'
        assert user['last_name'] == 'Earhart'
        assert user['user_type'] == 'student'
        assert user['enrolled_courses'] == []
        assert 'password' not in user
        assert 'login_attempts' not in user

    def test_register_duplicate_email(self, api_client, student_user):
        payload = dict(REGISTRATION, email=student_user.email.upper())

        response = api_client.post('/api/v1/auth/register/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['status'] == 'error'
        assert response.json()['code'] == 'DUPLICATE_EMAIL'

    def test_register_validation_errors(self, api_client):
        payload = dict(REGISTRATION, password='short', first_name='A')

        response = api_client.post('/api/v1/auth/register/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body['code'] == 'VALIDATION_ERROR'
        assert 'password' in body['errors']
        assert 'first_name' in body['errors']
        assert not User.objects.filter(email='amelia@academy.test').exists()

    def test_register_admin_forbidden(self, api_client):
        payload = dict(REGISTRATION, user_type='admin')

        response = api_client.post('/api/v1/auth/register/', payload, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_login(self, api_client, student_user, user_password):
        response = api_client.post('/api/v1/auth/login/', {
            'email': student_user.email,
            'password': user_password,
            'user_type': 'student',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['data']['token']

    def test_login_wrong_password(self, api_client, student_user):
        response = api_client.post('/api/v1/auth/login/', {
            'email': student_user.email,
            'password': 'Wrong123',
            'user_type': 'student',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()['code'] == 'INVALID_CREDENTIALS'

    def test_login_user_type_mismatch(self, api_client, student_user, user_password):
        response = api_client.post('/api/v1/auth/login/', {
            'email': student_user.email,
            'password': user_password,
            'user_type': 'admin',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_login_requires_user_type(self, api_client, student_user, user_password):
        response = api_client.post('/api/v1/auth/login/', {
            'email': student_user.email,
            'password': user_password,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body['code'] == 'VALIDATION_ERROR'
        assert 'user_type' in body['errors']

        student_user.refresh_from_db()
        assert student_user.last_login is None

    def test_lockout(self, api_client, student_user, user_password):
        for _ in range(5):
            api_client.post('/api/v1/auth/login/', {
                'email': student_user.email,
                'password': 'Wrong123',
                'user_type': 'student',
            }, format='json')

        response = api_client.post('/api/v1/auth/login/', {
            'email': student_user.email,
            'password': user_password,
            'user_type': 'student',
        }, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()['code'] == 'ACCOUNT_LOCKED'
        assert response.json()['locked_until']

    def test_me_requires_token(self, api_client):
        response = api_client.get('/api/v1/auth/me/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()['status'] == 'error'

    def test_me_invalid_token(self, api_client):
        response = bearer(api_client, 'garbage').get('/api/v1/auth/me/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()['code'] == 'TOKEN_INVALID'

    def test_me_lists_enrolled_courses(self, student_client, enrollment):
        response = student_client.get('/api/v1/auth/me/')

        courses = response.json()['data']['user']['enrolled_courses']
        assert len(courses) == 1
        assert courses[0]['course_name'] == enrollment.course.title
        assert courses[0]['status'] == 'enrolled'

    def test_refresh_and_logout(self, student_client):
        response = student_client.post('/api/v1/auth/refresh/')
        assert response.status_code == status.HTTP_200_OK
        assert response.json()['data']['token']

        response = student_client.post('/api/v1/auth/logout/')
        assert response.status_code == status.HTTP_200_OK


class TestUserEndpoints:

    def test_get_own_profile(self, student_client, student_user):
        response = student_client.get(f'/api/v1/users/{student_user.id}/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['data']['user']['email'] == student_user.email

    def test_get_other_profile_forbidden(self, student_client, other_student):
        response = student_client.get(f'/api/v1/users/{other_student.id}/')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()['code'] == 'FORBIDDEN'

    def test_update_profile(self, student_client, student_user):
        response = student_client.put(f'/api/v1/users/{student_user.id}/', {
            'phone': '+1 555 0200',
            'address': {'city': 'Wichita', 'state': 'KS'},
            'flight_hours': '250.0',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        user = response.json()['data']['user']
        assert user['phone'] == '+1 555 0200'
        assert user['address']['city'] == 'Wichita'

        student_user.refresh_from_db()
        # Only administrators may change flight hours
        assert student_user.flight_hours == Decimal('0')

    def test_admin_updates_flight_hours(self, admin_client, student_user):
        response = admin_client.put(f'/api/v1/users/{student_user.id}/', {
            'flight_hours': '250.0',
            'certificates': 2,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        student_user.refresh_from_db()
        assert student_user.flight_hours == Decimal('250.0')
        assert student_user.certificates == 2

    def test_change_password(self, student_client, student_user, user_password):
        response = student_client.put(f'/api/v1/users/{student_user.id}/password/', {
            'current_password': user_password,
            'new_password': 'NewPass456',
            'confirm_password': 'NewPass456',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        student_user.refresh_from_db()
        assert student_user.check_password('NewPass456')

    def test_change_other_password_forbidden(self, admin_client, student_user):
        response = admin_client.put(f'/api/v1/users/{student_user.id}/password/', {
            'current_password': 'Pilot123',
            'new_password': 'NewPass456',
            'confirm_password': 'NewPass456',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_list_users_admin_only(self, admin_client, student_client, student_user):
        assert student_client.get('/api/v1/users/').status_code == status.HTTP_403_FORBIDDEN

        response = admin_client.get('/api/v1/users/', {'user_type': 'student'})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()['data']
        assert data['pagination']['count'] == 1
        assert data['results'][0]['email'] == student_user.email

    def test_deactivate_user(self, admin_client, student_user):
        response = admin_client.delete(f'/api/v1/users/{student_user.id}/')

        assert response.status_code == status.HTTP_200_OK
        student_user.refresh_from_db()
        assert not student_user.is_active
        assert User.objects.filter(pk=student_user.pk).exists()

    def test_cannot_deactivate_self(self, admin_client, admin_user):
        response = admin_client.delete(f'/api/v1/users/{admin_user.id}/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        admin_user.refresh_from_db()
        assert admin_user.is_active

    def test_deactivated_user_token_rejected(self, admin_client, student_client, student_user):
        admin_client.delete(f'/api/v1/users/{student_user.id}/')

        response = student_client.get('/api/v1/auth/me/')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()['code'] == 'INVALID_SESSION'


class TestCourseEndpoints:

    def test_public_list_shows_active_only(self, api_client, create_course):
        create_course(title='Private Pilot License')
        create_course(title='Draft Course', status=Course.Status.DRAFT)

        response = api_client.get('/api/v1/courses/', {'status': 'all'})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()['data']
        assert [c['title'] for c in data['results']] == ['Private Pilot License']
        assert set(data['pagination']) == {
            'count', 'total_pages', 'current_page', 'page_size', 'next', 'previous'
        }

    def test_admin_can_list_all_statuses(self, admin_client, create_course):
        create_course(title='Private Pilot License')
        create_course(title='Draft Course', status=Course.Status.DRAFT)

        response = admin_client.get('/api/v1/courses/', {'status': 'all'})

        assert response.json()['data']['pagination']['count'] == 2

    def test_list_filters_and_ordering(self, api_client, create_course):
        create_course(title='Commercial License', price='$30,000')
        create_course(title='Private Pilot License', price='$12,000')
        create_course(title='Instrument Rating', price='$8,000', category=Course.Category.RATING)

        response = api_client.get('/api/v1/courses/', {'category': 'license', 'ordering': 'price'})
        titles = [c['title'] for c in response.json()['data']['results']]
        assert titles == ['Private Pilot License', 'Commercial License']

        response = api_client.get('/api/v1/courses/', {'search': 'instrument'})
        assert [c['title'] for c in response.json()['data']['results']] == ['Instrument Rating']

    def test_retrieve(self, api_client, course):
        response = api_client.get(f'/api/v1/courses/{course.id}/')

        assert response.status_code == status.HTTP_200_OK
        detail = response.json()['data']['course']
        assert detail['title'] == course.title
        assert detail['active_enrollments'] == 0

    def test_retrieve_missing(self, api_client):
        response = api_client.get('/api/v1/courses/00000000-0000-0000-0000-000000000000/')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()['code'] == 'COURSE_NOT_FOUND'

    def test_create_requires_admin(self, student_client, api_client):
        payload = {
            'title': 'Commercial License',
            'description': 'Fly for hire with a commercial certificate.',
            'duration': '9 months',
            'price': '$30,000',
            'category': 'license',
        }
        assert api_client.post('/api/v1/courses/', payload, format='json').status_code == 401
        assert student_client.post('/api/v1/courses/', payload, format='json').status_code == 403

    def test_create_and_update_price(self, admin_client):
        response = admin_client.post('/api/v1/courses/', {
            'title': 'Commercial License',
            'description': 'Fly for hire with a commercial certificate.',
            'duration': '9 months',
            'price': '$8,500',
            'category': 'license',
            'curriculum': [{'module': 'Aerodynamics', 'estimated_hours': 12}],
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        course = response.json()['data']['course']
        assert Decimal(course['price_numeric']) == Decimal('8500')

        response = admin_client.put(
            f"/api/v1/courses/{course['id']}/", {'price': '$9,000'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.json()['data']['course']['price_numeric']) == Decimal('9000')

    def test_delete_with_active_enrollment(self, admin_client, enrollment):
        response = admin_client.delete(f'/api/v1/courses/{enrollment.course_id}/')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'COURSE_HAS_ACTIVE_ENROLLMENTS'

    def test_deactivate_via_update_with_active_enrollment(self, admin_client, enrollment):
        response = admin_client.put(
            f'/api/v1/courses/{enrollment.course_id}/', {'status': 'inactive'}, format='json'
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'COURSE_HAS_ACTIVE_ENROLLMENTS'

    def test_featured_and_category(self, api_client, create_course):
        create_course(title='Featured License', featured=True)
        create_course(title='Instrument Rating', category=Course.Category.RATING)

        response = api_client.get('/api/v1/courses/featured/list/')
        assert [c['title'] for c in response.json()['data']['courses']] == ['Featured License']

        response = api_client.get('/api/v1/courses/category/rating/')
        assert [c['title'] for c in response.json()['data']['courses']] == ['Instrument Rating']

        response = api_client.get('/api/v1/courses/category/spaceflight/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_stats_admin_only(self, admin_client, student_client, course):
        assert student_client.get('/api/v1/courses/analytics/stats/').status_code == 403
        response = admin_client.get('/api/v1/courses/analytics/stats/')
        assert response.json()['data']['total_courses'] == 1


class TestEnrollmentEndpoints:

    def test_enroll(self, student_client, course):
        response = student_client.post('/api/v1/enrollments/', {
            'course_id': str(course.id),
            'payment_mode': 'Credit Card',
            'installments': 'Within 6 months',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        enrollment = response.json()['data']['enrollment']
        assert enrollment['status'] == 'enrolled'
        assert len(enrollment['payment_schedule']) == 6
        assert all(Decimal(e['amount']) == Decimal('2000') for e in enrollment['payment_schedule'])

    def test_enroll_twice(self, student_client, enrollment):
        response = student_client.post('/api/v1/enrollments/', {
            'course_id': str(enrollment.course_id),
            'payment_mode': 'Credit Card',
            'installments': 'Direct Payment',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'DUPLICATE_ENROLLMENT'

    def test_enroll_full_course(self, student_client, create_course, create_user):
        course = create_course(max_students=1)
        EnrollmentService.create_enrollment(
            create_user(), course.id, 'Cash', Enrollment.InstallmentPlan.DIRECT
        )

        response = student_client.post('/api/v1/enrollments/', {
            'course_id': str(course.id),
            'payment_mode': 'Cash',
            'installments': 'Direct Payment',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'COURSE_FULL'

    def test_admin_cannot_enroll(self, admin_client, course):
        response = admin_client.post('/api/v1/enrollments/', {
            'course_id': str(course.id),
            'payment_mode': 'Cash',
            'installments': 'Direct Payment',
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_my_enrollments(self, student_client, enrollment):
        response = student_client.get('/api/v1/enrollments/my/')

        assert response.status_code == status.HTTP_200_OK
        assert [e['id'] for e in response.json()['data']['enrollments']] == [str(enrollment.id)]

    def test_retrieve_owner_and_other(self, student_client, create_user, enrollment):
        assert student_client.get(f'/api/v1/enrollments/{enrollment.id}/').status_code == 200

        other = create_user()
        client = bearer(APIClient(), AuthService().issue_token(other.id))

        assert client.get(f'/api/v1/enrollments/{enrollment.id}/').status_code == 403

    def test_private_notes_hidden_from_student(self, admin_client, student_client, enrollment):
        admin_client.post(f'/api/v1/enrollments/{enrollment.id}/notes/', {
            'content': 'Shared feedback',
        }, format='json')
        admin_client.post(f'/api/v1/enrollments/{enrollment.id}/notes/', {
            'content': 'Instructor only',
            'is_private': True,
        }, format='json')

        student_view = student_client.get(f'/api/v1/enrollments/{enrollment.id}/').json()
        admin_view = admin_client.get(f'/api/v1/enrollments/{enrollment.id}/').json()

        assert [n['content'] for n in student_view['data']['enrollment']['notes']] == ['Shared feedback']
        assert len(admin_view['data']['enrollment']['notes']) == 2

    def test_progress_completes(self, admin_client, enrollment):
        response = admin_client.put(f'/api/v1/enrollments/{enrollment.id}/progress/', {
            'overall_progress': 100,
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        data = response.json()['data']['enrollment']
        assert data['status'] == 'completed'
        assert data['is_completed'] is True

    def test_progress_requires_admin(self, student_client, enrollment):
        response = student_client.put(f'/api/v1/enrollments/{enrollment.id}/progress/', {
            'overall_progress': 100,
        }, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_progress_out_of_range(self, admin_client, enrollment):
        response = admin_client.put(f'/api/v1/enrollments/{enrollment.id}/progress/', {
            'overall_progress': 150,
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_payment(self, admin_client, enrollment):
        response = admin_client.post(f'/api/v1/enrollments/{enrollment.id}/payment/', {
            'amount': '2000.00',
            'transaction_id': 'TXN-42',
        }, format='json')

        assert response.status_code == status.HTTP_200_OK
        data = response.json()['data']['enrollment']
        assert data['payment_status'] == 'partial'
        assert data['payment_schedule'][0]['status'] == 'paid'

    def test_payment_invalid_amount(self, admin_client, enrollment):
        response = admin_client.post(f'/api/v1/enrollments/{enrollment.id}/payment/', {
            'amount': '0',
        }, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'INVALID_AMOUNT'

    def test_status_transition(self, admin_client, enrollment):
        response = admin_client.put(f'/api/v1/enrollments/{enrollment.id}/status/', {
            'status': 'dropped',
        }, format='json')
        assert response.status_code == status.HTTP_200_OK

        response = admin_client.put(f'/api/v1/enrollments/{enrollment.id}/status/', {
            'status': 'enrolled',
        }, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['code'] == 'INVALID_STATUS_TRANSITION'

    def test_list_and_stats_admin(self, admin_client, enrollment):
        response = admin_client.get('/api/v1/enrollments/', {'status': 'enrolled'})
        assert response.json()['data']['pagination']['count'] == 1

        response = admin_client.get('/api/v1/enrollments/analytics/stats/')
        assert response.json()['data']['overview']['total'] == 1


class TestAdminEndpoints:

    def test_dashboard(self, admin_client, student_client, enrollment):
        assert student_client.get('/api/v1/admin/dashboard/').status_code == 403

        response = admin_client.get('/api/v1/admin/dashboard/')

        assert response.status_code == status.HTTP_200_OK
        assert response.json()['data']['counts']['total_enrollments'] == 1

    def test_students(self, admin_client, student_user, enrollment):
        response = admin_client.get('/api/v1/admin/students/', {'search': 'earhart'})

        rows = response.json()['data']['results']
        assert len(rows) == 1
        assert rows[0]['total_courses'] == 1
        assert rows[0]['active_courses'] == 1

    def test_student_detail(self, admin_client, student_user, enrollment):
        response = admin_client.get(f'/api/v1/admin/students/{student_user.id}/')

        data = response.json()['data']
        assert data['student']['email'] == student_user.email
        assert len(data['enrollments']) == 1
        assert Decimal(data['statistics']['total_course_fees']) == Decimal('12000')

    def test_student_detail_rejects_admin_id(self, admin_client, admin_user):
        response = admin_client.get(f'/api/v1/admin/students/{admin_user.id}/')

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_student_status(self, admin_client, student_user):
        response = admin_client.put(
            f'/api/v1/admin/students/{student_user.id}/status/', {'is_active': False}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        student_user.refresh_from_db()
        assert not student_user.is_active

    def test_analytics_and_export(self, admin_client, enrollment):
        response = admin_client.get('/api/v1/admin/analytics/')
        assert len(response.json()['data']['enrollment_trends']) == 12

        response = admin_client.get('/api/v1/admin/export/enrollments/')
        assert response.json()['data']['count'] == 1

        response = admin_client.get('/api/v1/admin/export/aircraft/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
