import numpy as np
import matplotlib.pyplot as plt

from linucb.config import BanditConfig, build_bandit
from linucb.sim.runner import cumulative_reward, run_rounds, windowed_selection_rate
from linucb.sim.user_models import click_scenario

def main(seeds=(0, 1, 2, 3, 4), out="experiments/fig_windows.png"):
    base = BanditConfig.from_env()
    rate_curves, reward_curves = [], []
    for s in seeds:
        config = BanditConfig(alpha=base.alpha, seed=s, incremental=base.incremental,
                              rounds=base.rounds, window=base.window)
        user = click_scenario(seed=s)
        history = run_rounds(build_bandit(config, d=user.d), user, config.rounds)
        rate_curves.append(windowed_selection_rate(history, arm=1, context=[1.0, 0.0],
                                                   window=config.window))
        reward_curves.append(cumulative_reward(history))

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(10, 4))
    rates = np.nanmean(np.array(rate_curves), axis=0)
    ax1.plot(np.arange(1, len(rates) + 1) * base.window, rates, marker="o")
    ax1.set_xlabel("Round")
    ax1.set_ylabel("P(arm 1 | x=[1,0])")
    ax1.set_ylim(0, 1)
    ax1.set_title(f"Arm 1 selection rate per {base.window} rounds")

    ax2.plot(np.arange(1, base.rounds + 1), np.mean(np.stack(reward_curves), axis=0))
    ax2.set_xlabel("Round")
    ax2.set_ylabel("Cumulative reward")
    ax2.set_title(f"LinUCB, alpha={base.alpha}")
    fig.tight_layout()
    fig.savefig(out, dpi=160)
    print(f"Saved plot to {out}")

if __name__ == "__main__":
    main()
