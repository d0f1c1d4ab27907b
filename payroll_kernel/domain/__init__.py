"""Pure domain layer of the payroll kernel: value objects and the clock."""
