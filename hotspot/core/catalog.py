PACKAGES = [
    {
        'id': '1h',
        'name': '1 Hour',
        'price': 10.00,
        'duration': '1 hour',
        'features': ['High-speed connection', 'Unlimited access', 'Pay via Wave'],
    },
    {
        'id': '24h',
        'name': '24 Hours',
        'price': 25.00,
        'duration': '24 hours',
        'popular': True,
        'features': ['High-speed connection', 'Full day access', 'Pay via Wave', 'Best value!'],
    },
    {
        'id': '1w',
        'name': '1 Week',
        'price': 100.00,
        'duration': '7 days',
        'features': ['High-speed connection', '7 days unlimited', 'Pay via Wave', 'Save 40%'],
    },
    {
        'id': '1m',
        'name': '1 Month',
        'price': 350.00,
        'duration': '30 days',
        'features': ['High-speed connection', '30 days unlimited', 'Pay via Wave', 'Priority support', 'Save 50%'],
    },
]


def get_package(package_type):
    if not package_type:
        return None
    wanted = str(package_type).lower()
    return next((p for p in PACKAGES if p['id'] == wanted), None)
