"""
Fluzio rules service entry point.
"""
import os
import sys
import traceback

config_name = os.getenv('FLASK_ENV', 'production')
print(f"[Fluzio] Starting rules service (config: {config_name})")
print(f"[Fluzio] DATABASE_URL: {'set' if os.getenv('DATABASE_URL') else 'NOT SET'}")

try:
    from fluzio import create_app
    app = create_app(config_name)
    print(f"[Fluzio] Routes: {len(list(app.url_map.iter_rules()))}")
except Exception as e:
    print(f"[Fluzio] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=os.getenv('FLASK_ENV') == 'development'
    )
