"""HTTP controllers for the smart cache router."""
