from workhub_api import create_app
from workhub_api.models.employee import Employee

app = create_app()

with app.app_context():
    employees = Employee.query.order_by(Employee.code.asc()).all()
    print(f"Found {len(employees)} employees:")
    for emp in employees:
        print(f"ID: {emp.id}, Code: {emp.code}, Name: {emp.name}, Email: {emp.email}, "
              f"Type: {emp.user_type}, Mode: {emp.work_mode}, Status: {emp.status}")
