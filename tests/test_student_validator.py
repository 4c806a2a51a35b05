import pytest

from app.db.models import Gender
from app.validators.sanitizer import sanitize_student
from app.validators.student_validator import STUDENT_FIELDS, validate_student


class TestRequiredFields:
    """Presence checks and error accumulation."""

    @pytest.mark.parametrize(
        "field", ["studentId", "name", "gender", "age", "major", "grade"]
    )
    def test_missing_required_field_is_reported_alone(self, make_student_data, field):
        data = make_student_data()
        del data[field]

        result = validate_student(data)

        expected_key = "student_id" if field == "studentId" else field
        assert result.is_valid is False
        assert list(result.errors) == [expected_key]

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_values_count_as_missing(self, make_student_data, blank):
        result = validate_student(make_student_data(name=blank))

        assert result.errors == {"name": "Name is required"}

    def test_all_errors_reported_in_one_pass(self):
        result = validate_student({})

        assert result.is_valid is False
        assert list(result.errors) == [
            "student_id",
            "name",
            "gender",
            "age",
            "major",
            "grade",
        ]

    def test_optional_fields_may_be_absent(self, make_student_data):
        data = make_student_data()
        del data["email"]
        data["phone"] = "  "

        result = validate_student(data)

        assert result.is_valid is True
        assert result.errors == {}

    def test_snake_case_student_id_is_accepted(self, make_student_data):
        data = make_student_data()
        data["student_id"] = data.pop("studentId")

        assert validate_student(data).is_valid is True


class TestStudentId:
    def test_too_short(self, make_student_data):
        result = validate_student(make_student_data(studentId="AB12"))

        assert result.is_valid is False
        assert "student_id" in result.errors

    def test_minimum_length_is_valid(self, make_student_data):
        result = validate_student(make_student_data(studentId="AB1234"))

        assert result.is_valid is True

    def test_too_long(self, make_student_data):
        result = validate_student(make_student_data(studentId="A" * 21))

        assert result.errors["student_id"] == "Student ID must be 6-20 characters long"

    @pytest.mark.parametrize("student_id", ["AB-1234", "AB 1234", "学号123456"])
    def test_non_alphanumeric(self, make_student_data, student_id):
        result = validate_student(make_student_data(studentId=student_id))

        assert (
            result.errors["student_id"]
            == "Student ID may only contain letters and digits"
        )

    def test_surrounding_whitespace_is_ignored(self, make_student_data):
        assert validate_student(make_student_data(studentId="  AB1234  ")).is_valid

    def test_integer_student_id(self, make_student_data):
        assert validate_student(make_student_data(studentId=20240001)).is_valid


class TestName:
    @pytest.mark.parametrize("name", ["张三", "John Smith", "欧阳 娜娜"])
    def test_valid_names(self, make_student_data, name):
        assert validate_student(make_student_data(name=name)).is_valid

    def test_too_short(self, make_student_data):
        result = validate_student(make_student_data(name="A"))

        assert result.errors == {"name": "Name must be 2-50 characters long"}

    @pytest.mark.parametrize("name", ["John3", "O'Brien", "张_三"])
    def test_invalid_characters(self, make_student_data, name):
        result = validate_student(make_student_data(name=name))

        assert result.errors == {"name": "Name may only contain letters and spaces"}


class TestGender:
    @pytest.mark.parametrize("gender", ["MALE", "female", "男", "女", Gender.FEMALE])
    def test_accepted_labels(self, make_student_data, gender):
        assert validate_student(make_student_data(gender=gender)).is_valid

    def test_unknown_label(self, make_student_data):
        result = validate_student(make_student_data(gender="other"))

        assert result.errors == {"gender": "Gender must be MALE or FEMALE"}


class TestAge:
    @pytest.mark.parametrize("age", [16, 60, "25", " 30 "])
    def test_valid_ages(self, make_student_data, age):
        assert validate_student(make_student_data(age=age)).is_valid

    @pytest.mark.parametrize("age", [15, 61, 0, "abc", "20.5", True, 20.5])
    def test_invalid_ages(self, make_student_data, age):
        result = validate_student(make_student_data(age=age))

        assert result.is_valid is False
        assert list(result.errors) == ["age"]


class TestMajorAndGrade:
    def test_major_too_short(self, make_student_data):
        result = validate_student(make_student_data(major="X"))

        assert result.errors == {"major": "Major must be 2-100 characters long"}

    def test_major_too_long(self, make_student_data):
        result = validate_student(make_student_data(major="x" * 101))

        assert "major" in result.errors

    @pytest.mark.parametrize("grade", ["大一", "大四", "研三", "博四", "2023级"])
    def test_valid_grades(self, make_student_data, grade):
        assert validate_student(make_student_data(grade=grade)).is_valid

    @pytest.mark.parametrize("grade", ["大五", "2023", "23级", "Freshman"])
    def test_invalid_grades(self, make_student_data, grade):
        result = validate_student(make_student_data(grade=grade))

        assert list(result.errors) == ["grade"]


class TestEmailAndPhone:
    def test_invalid_email(self, make_student_data):
        result = validate_student(make_student_data(email="not-an-email"))

        assert result.errors == {"email": "Email format is invalid"}

    def test_email_too_long(self, make_student_data):
        email = "a" * 95 + "@x.com"

        result = validate_student(make_student_data(email=email))

        assert result.errors == {"email": "Email must be at most 100 characters"}

    @pytest.mark.parametrize("phone", ["12345678901", "1380013800", "138001380012", "1380013800a"])
    def test_invalid_phone(self, make_student_data, phone):
        result = validate_student(make_student_data(phone=phone))

        assert list(result.errors) == ["phone"]

    def test_valid_phone(self, make_student_data):
        assert validate_student(make_student_data(phone="19912345678")).is_valid


class TestSanitizer:
    def test_canonical_form(self, make_student_data):
        data = make_student_data(
            studentId=" AB1234 ",
            name=" 张三 ",
            gender="男",
            age="25",
            email="  ZhangSan@Example.COM ",
            phone=" 13800138001 ",
        )

        sanitized = sanitize_student(data)

        assert sanitized == {
            "student_id": "AB1234",
            "name": "张三",
            "gender": "MALE",
            "age": 25,
            "major": "计算机科学与技术",
            "grade": "大二",
            "email": "zhangsan@example.com",
            "phone": "13800138001",
        }

    def test_blank_optional_fields_become_none(self, make_student_data):
        sanitized = sanitize_student(make_student_data(email=" ", phone=None))

        assert sanitized["email"] is None
        assert sanitized["phone"] is None

    def test_unknown_keys_are_dropped(self, make_student_data):
        sanitized = sanitize_student(make_student_data(id=99, extra="x"))

        assert set(sanitized) == set(STUDENT_FIELDS)

    def test_idempotent(self, make_student_data):
        once = sanitize_student(
            make_student_data(name="  John  Smith ", age=" 18", gender="female")
        )

        assert sanitize_student(once) == once

    def test_sanitized_record_still_validates(self, make_student_data):
        sanitized = sanitize_student(make_student_data(age="40"))

        assert validate_student(sanitized).is_valid
